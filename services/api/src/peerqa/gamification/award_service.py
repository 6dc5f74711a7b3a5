"""Award evaluator — matches review counters against achievement thresholds.

Grants fire on exact equality: only the review event that lands a counter
exactly on a threshold earns that achievement. Events that step past a
threshold never earn it retroactively.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from peerqa.db.models import Badge, User, UserAchievement, UserBadge
from peerqa.db.upsert import insert_ignoring_conflicts
from peerqa.errors import NotFoundError, PersistenceError
from peerqa.gamification.catalog import Catalog, PointKind

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


@dataclass
class AwardResult:
    """Newly granted ids from one evaluation pass, in grant order."""

    user_id: int
    kind: PointKind
    achievements: list[int] = field(default_factory=list)
    badges: list[int] = field(default_factory=list)


async def _current_counter(db: AsyncSession, user_id: int, kind: PointKind) -> float:
    column = User.sending_review_points if kind is PointKind.SENDING else User.receiving_review_points
    result = await db.execute(select(column).where(User.id == user_id))
    value = result.scalar_one_or_none()
    if value is None:
        msg = "User not found"
        raise NotFoundError(msg)
    return value


async def evaluate_and_grant(
    db: AsyncSession,
    user_id: int,
    kind: PointKind,
    *,
    catalog: Catalog,
    counter: float | None = None,
    redis: object = None,
) -> AwardResult:
    """Grant every achievement whose ``kind`` threshold equals the user's counter.

    ``counter`` is the value produced by the review event being evaluated; it
    defaults to the stored counter. Each new achievement also grants its badge
    unless the user already holds it. Everything is committed once at the end.

    Raises:
        CatalogUnavailableError: The catalog could not be loaded. Nothing was written.
        PersistenceError: A grant could not be committed. Nothing was written.
    """
    entries = await catalog.load(db)
    if counter is None:
        counter = await _current_counter(db, user_id, kind)

    award = AwardResult(user_id=user_id, kind=kind)
    # A zero threshold would match every fresh user; it never fires
    matched = [e for e in entries if e.threshold(kind) > 0 and e.threshold(kind) == counter]
    if not matched:
        return award

    now = datetime.now(timezone.utc)
    try:
        owned_achievements = set(
            (await db.execute(select(UserAchievement.achievement_id).where(UserAchievement.user_id == user_id)))
            .scalars()
            .all()
        )
        owned_badges = set(
            (await db.execute(select(UserBadge.badge_id).where(UserBadge.user_id == user_id))).scalars().all()
        )
        linked_badges = sorted({e.badge_id for e in matched})
        existing_badges = set(
            (await db.execute(select(Badge.id).where(Badge.id.in_(linked_badges)))).scalars().all()
        )

        for entry in matched:
            if entry.achievement_id in owned_achievements:
                continue
            # A concurrent evaluation may have inserted it since we read owned_achievements
            if not await insert_ignoring_conflicts(
                db,
                UserAchievement,
                ["user_id", "achievement_id"],
                user_id=user_id,
                achievement_id=entry.achievement_id,
                earned_at=now,
            ):
                continue
            owned_achievements.add(entry.achievement_id)
            award.achievements.append(entry.achievement_id)

            if entry.badge_id not in existing_badges or entry.badge_id in owned_badges:
                continue
            if await insert_ignoring_conflicts(
                db,
                UserBadge,
                ["user_id", "badge_id"],
                user_id=user_id,
                badge_id=entry.badge_id,
                earned_at=now,
            ):
                award.badges.append(entry.badge_id)
            owned_badges.add(entry.badge_id)

        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("award_grant_failed", user_id=user_id, kind=kind.value, error=str(e))
        msg = f"Could not record awards for user {user_id}"
        raise PersistenceError(msg) from e

    if award.achievements:
        logger.info(
            "awards_granted",
            user_id=user_id,
            kind=kind.value,
            counter=counter,
            achievements=award.achievements,
            badges=award.badges,
        )
    for badge_id in award.badges:
        await _emit_badge_earned(redis, user_id, badge_id)

    return award


async def _emit_badge_earned(redis: object, user_id: int, badge_id: int) -> None:
    """Publish a badge_earned event for live dashboards. Best effort."""
    if redis is None:
        return
    try:
        await redis.publish(  # type: ignore[attr-defined]
            "pubsub:badge_earned",
            json.dumps({"user_id": user_id, "badge_id": badge_id}),
        )
    except Exception:
        logger.warning("badge_earned_publish_failed", user_id=user_id, badge_id=badge_id, exc_info=True)
