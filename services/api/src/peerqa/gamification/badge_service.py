"""Badge administration.

Every mutation invalidates the process-wide achievement catalog.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError

from peerqa.db.models import Achievement, Badge, UserBadge
from peerqa.errors import ConflictError, NotFoundError
from peerqa.gamification.catalog import get_catalog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def list_badges(db: AsyncSession) -> list[Badge]:
    result = await db.execute(select(Badge).order_by(Badge.id))
    return list(result.scalars().all())


async def get_badge(db: AsyncSession, badge_id: int) -> Badge:
    result = await db.execute(select(Badge).where(Badge.id == badge_id))
    badge = result.scalar_one_or_none()
    if badge is None:
        msg = "Badge not found"
        raise NotFoundError(msg)
    return badge


async def _ensure_name_free(db: AsyncSession, name: str, exclude_id: int | None = None) -> None:
    stmt = select(Badge.id).where(Badge.name == name)
    if exclude_id is not None:
        stmt = stmt.where(Badge.id != exclude_id)
    if (await db.execute(stmt)).first() is not None:
        msg = "Badge name already exists"
        raise ConflictError(msg)


async def _commit(db: AsyncSession) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        msg = "Badge name already exists"
        raise ConflictError(msg) from e
    get_catalog().invalidate()


async def create_badge(db: AsyncSession, name: str, description: str, icon: str) -> Badge:
    await _ensure_name_free(db, name)
    badge = Badge(name=name, description=description, icon=icon)
    db.add(badge)
    await _commit(db)
    logger.info("badge_created", badge_id=badge.id, name=name)
    return badge


async def update_badge(
    db: AsyncSession,
    badge_id: int,
    name: str | None = None,
    description: str | None = None,
    icon: str | None = None,
) -> Badge:
    """Patch the given fields. Grants already made are untouched."""
    badge = await get_badge(db, badge_id)
    if name is not None and name != badge.name:
        await _ensure_name_free(db, name, exclude_id=badge_id)
        badge.name = name
    if description is not None:
        badge.description = description
    if icon is not None:
        badge.icon = icon
    await _commit(db)
    logger.info("badge_updated", badge_id=badge_id)
    return badge


async def delete_badge(db: AsyncSession, badge_id: int) -> None:
    """Delete a badge and every grant of it.

    Raises:
        ConflictError: An achievement still links to the badge.
    """
    badge = await get_badge(db, badge_id)
    linked = await db.execute(select(Achievement.id).where(Achievement.badge_id == badge_id).limit(1))
    if linked.first() is not None:
        msg = "Badge is linked to an achievement"
        raise ConflictError(msg)

    await db.execute(delete(UserBadge).where(UserBadge.badge_id == badge_id))
    await db.delete(badge)
    await _commit(db)
    logger.info("badge_deleted", badge_id=badge_id)
