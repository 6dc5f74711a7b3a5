"""Point ledger — review counters on the users row.

Counters move through a single ``UPDATE ... SET x = x + delta`` so concurrent
submissions touching the same user cannot lose an increment. The
post-increment values are read back inside the same transaction and handed to
the award evaluator, so every event is judged against the value it produced.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog
from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError

from peerqa.config import get_settings
from peerqa.db.models import User
from peerqa.errors import PersistenceError
from peerqa.gamification.catalog import PointKind

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

logger = structlog.get_logger()


class ReviewRole(str, enum.Enum):
    REVIEWER = "reviewer"
    REVIEWEE = "reviewee"

    @property
    def point_kind(self) -> PointKind:
        return PointKind.SENDING if self is ReviewRole.REVIEWER else PointKind.RECEIVING


@dataclass(frozen=True)
class PointBalance:
    """Counters as committed by one ledger update."""

    user_id: int
    sending_review_points: float
    receiving_review_points: float
    total_points: float

    def counter(self, kind: PointKind) -> float:
        if kind is PointKind.SENDING:
            return self.sending_review_points
        return self.receiving_review_points


def review_delta(role: ReviewRole) -> float:
    settings = get_settings()
    if role is ReviewRole.REVIEWER:
        return settings.review_sending_points
    return settings.review_receiving_points


async def apply_review_points(db: AsyncSession, user_id: int, role: ReviewRole) -> PointBalance:
    """Credit one review event to ``user_id`` and commit.

    Reviewers earn a sending point, reviewees half a receiving point (both
    configurable). ``total_points`` is rewritten in the same statement.

    Raises:
        PersistenceError: The row is gone or the write could not be committed.
    """
    delta = review_delta(role)
    total = User.sending_review_points + User.receiving_review_points + delta
    if role is ReviewRole.REVIEWER:
        values = {"sending_review_points": User.sending_review_points + delta, "total_points": total}
    else:
        values = {"receiving_review_points": User.receiving_review_points + delta, "total_points": total}

    try:
        result = await db.execute(
            update(User)
            .where(User.id == user_id)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            await db.rollback()
            msg = f"User {user_id} could not be updated"
            raise PersistenceError(msg)

        row = (
            await db.execute(
                select(
                    User.sending_review_points,
                    User.receiving_review_points,
                    User.total_points,
                ).where(User.id == user_id)
            )
        ).one()
        await db.commit()
    except SQLAlchemyError as e:
        await db.rollback()
        logger.error("review_points_update_failed", user_id=user_id, role=role.value, error=str(e))
        msg = f"User {user_id} could not be updated"
        raise PersistenceError(msg) from e

    balance = PointBalance(
        user_id=user_id,
        sending_review_points=row.sending_review_points,
        receiving_review_points=row.receiving_review_points,
        total_points=row.total_points,
    )
    logger.debug(
        "review_points_applied",
        user_id=user_id,
        role=role.value,
        delta=delta,
        total_points=balance.total_points,
    )
    return balance
