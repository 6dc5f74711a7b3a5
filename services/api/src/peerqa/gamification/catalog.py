"""Achievement catalog — read-only threshold table consumed by the award evaluator.

The catalog is injected into the evaluator instead of being queried inline, so
tests can hand it a fixed set of entries. The process-wide instance caches the
table in memory and reloads it whenever the shared catalog revision moves.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from peerqa.db.models import Achievement, CatalogRevision
from peerqa.db.upsert import insert_or_increment
from peerqa.errors import CatalogUnavailableError

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()

_REVISION_ROW = 1


class PointKind(str, enum.Enum):
    """Which counter an evaluation compares against."""

    SENDING = "sending"
    RECEIVING = "receiving"


@dataclass(frozen=True)
class CatalogEntry:
    """Detached snapshot of one achievement row."""

    achievement_id: int
    name: str
    sending_review_points: float
    receiving_review_points: float
    badge_id: int

    def threshold(self, kind: PointKind) -> float:
        if kind is PointKind.SENDING:
            return self.sending_review_points
        return self.receiving_review_points


class Catalog(Protocol):
    async def load(self, db: AsyncSession) -> tuple[CatalogEntry, ...]: ...


class AchievementCatalog:
    """Database-backed catalog with an in-memory cache.

    Entries are ordered by achievement id (creation order), which fixes which
    achievement wins a badge shared by several simultaneously-qualifying ones.

    Every load reads the shared catalog revision first and serves the cache
    only while it is unchanged, so edits committed by another worker or by
    ``peerqa.maintenance seed`` are picked up on the next evaluation.
    """

    def __init__(self) -> None:
        self._entries: tuple[CatalogEntry, ...] | None = None
        self._revision: int | None = None
        self._generation = 0

    async def load(self, db: AsyncSession) -> tuple[CatalogEntry, ...]:
        generation = self._generation
        try:
            revision = await current_revision(db)
            if self._entries is not None and revision == self._revision:
                return self._entries

            result = await db.execute(
                select(
                    Achievement.id,
                    Achievement.name,
                    Achievement.sending_review_points,
                    Achievement.receiving_review_points,
                    Achievement.badge_id,
                ).order_by(Achievement.id)
            )
            entries = tuple(
                CatalogEntry(
                    achievement_id=row.id,
                    name=row.name,
                    sending_review_points=row.sending_review_points,
                    receiving_review_points=row.receiving_review_points,
                    badge_id=row.badge_id,
                )
                for row in result
            )
        except SQLAlchemyError as e:
            logger.error("achievement_catalog_load_failed", error=str(e))
            msg = "Achievement catalog unavailable"
            raise CatalogUnavailableError(msg) from e

        # An invalidate() that landed while we were querying wins over this result
        if generation == self._generation:
            if self._revision is not None and revision != self._revision:
                logger.info("achievement_catalog_reloaded", revision=revision, entries=len(entries))
            self._entries = entries
            self._revision = revision
        return entries

    def invalidate(self) -> None:
        """Drop this process's cache. Other processes notice via the shared revision."""
        self._entries = None
        self._generation += 1


async def current_revision(db: AsyncSession) -> int:
    result = await db.execute(select(CatalogRevision.revision).where(CatalogRevision.id == _REVISION_ROW))
    return result.scalar_one_or_none() or 0


async def bump_revision(db: AsyncSession) -> None:
    """Record a catalog change in the caller's transaction; the caller commits."""
    await insert_or_increment(db, CatalogRevision, ["id"], "revision", id=_REVISION_ROW)


class StaticCatalog:
    """Fixed catalog, never touches the database."""

    def __init__(self, entries: list[CatalogEntry] | tuple[CatalogEntry, ...]) -> None:
        self._entries = tuple(sorted(entries, key=lambda e: e.achievement_id))

    async def load(self, db: AsyncSession) -> tuple[CatalogEntry, ...]:  # noqa: ARG002
        return self._entries


_catalog = AchievementCatalog()


def get_catalog() -> AchievementCatalog:
    """Process-wide catalog (FastAPI dependency)."""
    return _catalog
