"""User read paths: snapshots, earned awards, leaderboard."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import select

from peerqa.db.models import Achievement, Badge, User, UserAchievement, UserBadge
from peerqa.errors import NotFoundError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class EarnedAchievement:
    achievement_id: int
    name: str
    description: str
    badge_id: int
    earned_at: datetime


@dataclass(frozen=True)
class EarnedBadge:
    badge_id: int
    name: str
    description: str
    icon: str
    earned_at: datetime


async def load_user(db: AsyncSession, user_id: int) -> User | None:
    """Fetch a user, overwriting any stale copy held by the session.

    Counters are written with bulk UPDATEs that bypass the identity map, so a
    plain get() could hand back the pre-increment values.
    """
    result = await db.execute(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    )
    return result.scalar_one_or_none()


async def get_user_snapshot(db: AsyncSession, user_id: int) -> User:
    user = await load_user(db, user_id)
    if user is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return user


async def get_user_achievements(db: AsyncSession, user_id: int) -> list[EarnedAchievement]:
    """Achievements held by ``user_id`` in grant order."""
    await get_user_snapshot(db, user_id)
    result = await db.execute(
        select(UserAchievement, Achievement)
        .join(Achievement, UserAchievement.achievement_id == Achievement.id)
        .where(UserAchievement.user_id == user_id)
        .order_by(UserAchievement.id)
    )
    return [
        EarnedAchievement(
            achievement_id=row.Achievement.id,
            name=row.Achievement.name,
            description=row.Achievement.description,
            badge_id=row.Achievement.badge_id,
            earned_at=row.UserAchievement.earned_at,
        )
        for row in result
    ]


async def get_user_badges(db: AsyncSession, user_id: int) -> list[EarnedBadge]:
    """Badges held by ``user_id`` in grant order."""
    await get_user_snapshot(db, user_id)
    result = await db.execute(
        select(UserBadge, Badge)
        .join(Badge, UserBadge.badge_id == Badge.id)
        .where(UserBadge.user_id == user_id)
        .order_by(UserBadge.id)
    )
    return [
        EarnedBadge(
            badge_id=row.Badge.id,
            name=row.Badge.name,
            description=row.Badge.description,
            icon=row.Badge.icon,
            earned_at=row.UserBadge.earned_at,
        )
        for row in result
    ]


async def get_leaderboard(db: AsyncSession, limit: int | None = None) -> list[User]:
    """Users by total_points descending; ties keep id order."""
    stmt = (
        select(User)
        .order_by(User.total_points.desc(), User.id.asc())
        .execution_options(populate_existing=True)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    result = await db.execute(stmt)
    return list(result.scalars().all())
