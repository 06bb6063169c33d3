"""Row locks for aggregate roots.

Every mutation of an aggregate's member rows first takes ``SELECT ... FOR
UPDATE`` on the aggregate row, so adding a member and deleting an emptied
aggregate are serialised per owner. SQLite has no row locks; there the lock
clause is dropped by the compiler and its database-wide write lock already
serialises writers.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from .upsert import insert_ignoring_conflicts

LOCK_ATTEMPTS = 3


def lock_statement(model: Any, **lookup: Any) -> Any:
    """``SELECT id ... FOR UPDATE`` for the row of ``model`` matching ``lookup``."""
    table = model.__table__
    return (
        select(table.c.id)
        .where(*(table.c[name] == value for name, value in lookup.items()))
        .with_for_update()
    )


async def lock_row_id(session: AsyncSession, model: Any, **lookup: Any) -> str | None:
    """Lock and return the id of an existing row, or ``None`` if there is none."""
    result = await session.execute(lock_statement(model, **lookup))
    return result.scalar_one_or_none()


async def ensure_locked_row_id(
    session: AsyncSession,
    model: Any,
    *,
    lookup: dict[str, Any],
    **values: Any,
) -> str:
    """Create the row if missing, then lock it and return its id.

    A concurrent transaction may delete the row between the insert and the
    lock; the locking select then returns nothing and the insert is retried.
    """
    for _ in range(LOCK_ATTEMPTS):
        await session.execute(insert_ignoring_conflicts(session, model, **lookup, **values))
        row_id = await lock_row_id(session, model, **lookup)
        if row_id is not None:
            return row_id
    raise RuntimeError(f"Could not lock {model.__tablename__} row for {lookup!r}")


__all__ = ["LOCK_ATTEMPTS", "ensure_locked_row_id", "lock_row_id", "lock_statement"]
