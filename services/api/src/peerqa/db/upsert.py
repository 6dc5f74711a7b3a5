"""Dialect-aware ``INSERT ... ON CONFLICT`` helpers."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from peerqa.db.base import Base

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


def _insert_for(db: AsyncSession):  # noqa: ANN202
    dialect = db.get_bind().dialect.name
    insert = _INSERTS.get(dialect)
    if insert is None:
        msg = f"Unsupported database dialect: {dialect}"
        raise RuntimeError(msg)
    return insert


async def insert_ignoring_conflicts(
    db: AsyncSession,
    model: type[Base],
    index_elements: list[str],
    **values: Any,  # noqa: ANN401
) -> bool:
    """Insert one row unless it collides on ``index_elements``.

    Returns True if a row was written, False if the conflict target already existed.
    """
    insert = _insert_for(db)
    stmt = insert(model).values(**values).on_conflict_do_nothing(index_elements=index_elements)
    result = await db.execute(stmt)
    return result.rowcount == 1


async def insert_or_increment(
    db: AsyncSession,
    model: type[Base],
    index_elements: list[str],
    column: str,
    **keys: Any,  # noqa: ANN401
) -> None:
    """Add 1 to ``column`` of the row matching ``keys``, creating it at 1 if absent."""
    insert = _insert_for(db)
    counter = getattr(model, column)
    stmt = (
        insert(model)
        .values(**keys, **{column: 1})
        .on_conflict_do_update(index_elements=index_elements, set_={column: counter + 1})
    )
    await db.execute(stmt)
