"""Default catalog — two badges and six review-count achievements.

Receiving thresholds are expressed in points: each received review is worth
half a point, so "Received 5 Reviews" fires at 2.5.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select

from peerqa.db.models import Achievement, Badge
from peerqa.db.upsert import insert_ignoring_conflicts
from peerqa.gamification.catalog import bump_revision, get_catalog

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

DEFAULT_BADGES: list[dict] = [
    {
        "name": "First Review",
        "description": "First review sent",
        "icon": "icon1.png",
    },
    {
        "name": "First Received Review",
        "description": "First review received",
        "icon": "icon2.png",
    },
]

DEFAULT_ACHIEVEMENTS: list[dict] = [
    {
        "name": "First Review Sent",
        "description": "Sent your first review",
        "sending_review_points": 1.0,
        "receiving_review_points": 0.0,
        "badge": "First Review",
    },
    {
        "name": "First Review Received",
        "description": "Received your first review",
        "sending_review_points": 0.0,
        "receiving_review_points": 0.5,
        "badge": "First Received Review",
    },
    {
        "name": "Sent 5 Reviews",
        "description": "Sent 5 reviews",
        "sending_review_points": 5.0,
        "receiving_review_points": 0.0,
        "badge": "First Review",
    },
    {
        "name": "Received 5 Reviews",
        "description": "Received 5 reviews",
        "sending_review_points": 0.0,
        "receiving_review_points": 2.5,
        "badge": "First Received Review",
    },
    {
        "name": "Sent 10 Reviews",
        "description": "Sent 10 reviews",
        "sending_review_points": 10.0,
        "receiving_review_points": 0.0,
        "badge": "First Review",
    },
    {
        "name": "Received 10 Reviews",
        "description": "Received 10 reviews",
        "sending_review_points": 0.0,
        "receiving_review_points": 5.0,
        "badge": "First Received Review",
    },
]


async def seed_catalog(db: AsyncSession) -> int:
    """Insert the default badges and achievements that are missing.

    Existing rows (matched by name) are left alone. Returns the number of rows inserted.
    """
    inserted = 0
    for badge_data in DEFAULT_BADGES:
        if await insert_ignoring_conflicts(db, Badge, ["name"], **badge_data):
            inserted += 1

    badge_ids = dict((await db.execute(select(Badge.name, Badge.id))).tuples().all())
    for data in DEFAULT_ACHIEVEMENTS:
        values = {k: v for k, v in data.items() if k != "badge"}
        if await insert_ignoring_conflicts(db, Achievement, ["name"], badge_id=badge_ids[data["badge"]], **values):
            inserted += 1

    if inserted:
        await bump_revision(db)
    await db.commit()
    if inserted:
        get_catalog().invalidate()
    logger.info("catalog_seeded", inserted=inserted)
    return inserted
