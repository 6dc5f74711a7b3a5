"""Administrative maintenance commands.

    python -m peerqa.maintenance seed
    python -m peerqa.maintenance reset-points
    python -m peerqa.maintenance clear-awards
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import delete, update

from peerqa.config import get_settings
from peerqa.database import close_db, create_schema, get_session_factory, init_db
from peerqa.db.models import User, UserAchievement, UserBadge
from peerqa.gamification.seed import seed_catalog
from peerqa.middleware.logging import setup_logging

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


async def reset_points(db: AsyncSession) -> int:
    """Zero every user's review counters. Returns the number of users touched."""
    result = await db.execute(
        update(User)
        .values(sending_review_points=0.0, receiving_review_points=0.0, total_points=0.0)
        .execution_options(synchronize_session=False)
    )
    await db.commit()
    logger.info("review_points_reset", users=result.rowcount)
    return result.rowcount


async def clear_awards(db: AsyncSession) -> tuple[int, int]:
    """Remove every achievement and badge grant. Returns (achievements, badges) removed."""
    achievements = await db.execute(delete(UserAchievement))
    badges = await db.execute(delete(UserBadge))
    await db.commit()
    logger.info("awards_cleared", achievements=achievements.rowcount, badges=badges.rowcount)
    return achievements.rowcount, badges.rowcount


_COMMANDS = {
    "seed": seed_catalog,
    "reset-points": reset_points,
    "clear-awards": clear_awards,
}


async def run(command: str, database_url: str | None = None) -> None:
    settings = get_settings()
    await init_db(database_url or settings.database_url)
    try:
        if settings.create_schema:
            await create_schema()
        async with get_session_factory()() as db:
            await _COMMANDS[command](db)
    finally:
        await close_db()


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="python -m peerqa.maintenance",
        description="PeerQA maintenance commands",
    )
    parser.add_argument(
        "command", choices=sorted(_COMMANDS),
        help="seed: insert the default catalog; reset-points: zero all counters; "
        "clear-awards: remove all achievement and badge grants",
    )
    parser.add_argument(
        "--database-url", default=None,
        help="Override PEERQA_DATABASE_URL",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    setup_logging(get_settings(), service="peerqa-maintenance")
    try:
        asyncio.run(run(args.command, args.database_url))
    except Exception:
        logger.exception("maintenance_failed", command=args.command)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
