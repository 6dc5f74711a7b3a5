"""Achievement administration.

Thresholds edited here only affect future evaluations; achievements already
granted are never revoked.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from peerqa.db.models import Achievement, Badge, UserAchievement
from peerqa.errors import ConflictError, NotFoundError
from peerqa.gamification.badge_service import get_badge
from peerqa.gamification.catalog import bump_revision, get_catalog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_achievements(db: AsyncSession) -> list[tuple[Achievement, Badge]]:
    """All achievements with their badge, in catalog order."""
    result = await db.execute(
        select(Achievement, Badge).join(Badge, Achievement.badge_id == Badge.id).order_by(Achievement.id)
    )
    return [(row.Achievement, row.Badge) for row in result]


async def get_achievement(db: AsyncSession, achievement_id: int) -> tuple[Achievement, Badge]:
    result = await db.execute(
        select(Achievement, Badge)
        .join(Badge, Achievement.badge_id == Badge.id)
        .where(Achievement.id == achievement_id)
    )
    row = result.first()
    if row is None:
        msg = "Achievement not found"
        raise NotFoundError(msg)
    return row.Achievement, row.Badge


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Achievement.id).where(Achievement.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Achievement.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        msg = "Achievement name already exists"
        raise ConflictError(msg)


async def _commit(db: AsyncSession) -> None:
    try:
        await bump_revision(db)
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "Achievement name already exists"
        raise ConflictError(msg) from e
    get_catalog().invalidate()


async def create_achievement(
    db: AsyncSession,
    name: str,
    description: str,
    sending_review_points: float,
    receiving_review_points: float,
    badge_id: int,
) -> tuple[Achievement, Badge]:
    badge = await get_badge(db, badge_id)
    await _ensure_name_free(db, name)
    achievement = Achievement(
        name=name,
        description=description,
        sending_review_points=sending_review_points,
        receiving_review_points=receiving_review_points,
        badge_id=badge.id,
    )
    db.add(achievement)
    await _commit(db)
    logger.info(
        "achievement_created",
        achievement_id=achievement.id,
        name=name,
        sending_review_points=sending_review_points,
        receiving_review_points=receiving_review_points,
        badge_id=badge.id,
    )
    return achievement, badge


async def update_achievement(
    db: AsyncSession,
    achievement_id: int,
    name: str | None = None,
    description: str | None = None,
    sending_review_points: float | None = None,
    receiving_review_points: float | None = None,
    badge_id: int | None = None,
) -> tuple[Achievement, Badge]:
    achievement, badge = await get_achievement(db, achievement_id)
    if name is not None and name != achievement.name:
        await _ensure_name_free(db, name, exclude_id=achievement_id)
        achievement.name = name
    if description is not None:
        achievement.description = description
    if sending_review_points is not None:
        achievement.sending_review_points = sending_review_points
    if receiving_review_points is not None:
        achievement.receiving_review_points = receiving_review_points
    if badge_id is not None and badge_id != badge.id:
        badge = await get_badge(db, badge_id)
        achievement.badge_id = badge.id
    await _commit(db)
    logger.info("achievement_updated", achievement_id=achievement_id)
    return achievement, badge


async def delete_achievement(db: AsyncSession, achievement_id: int) -> None:
    """Delete an achievement and its grants. Badges already earned through it stay."""
    achievement, _ = await get_achievement(db, achievement_id)
    await db.execute(delete(UserAchievement).where(UserAchievement.achievement_id == achievement_id))
    await db.delete(achievement)
    await _commit(db)
    logger.info("achievement_deleted", achievement_id=achievement_id)
