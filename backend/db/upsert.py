"""Dialect-aware insert-or-ignore statements.

Aggregate membership is mutated with ``INSERT ... ON CONFLICT DO NOTHING`` so
that "add to set" and "already present" are decided by a single statement
instead of a read followed by a write.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession


def insert_ignoring_conflicts(session: AsyncSession, model: Any, **values: Any) -> Any:
    """Build an insert for ``model`` that silently skips unique-key conflicts."""
    dialect_name = session.get_bind().dialect.name
    if dialect_name == "postgresql":
        statement = postgresql_insert(model.__table__)
    elif dialect_name == "sqlite":
        statement = sqlite_insert(model.__table__)
    else:
        raise NotImplementedError(f"Unsupported dialect for upserts: {dialect_name}")
    return statement.values(**values).on_conflict_do_nothing()


def affected_rows(result: Any) -> int:
    """Return the DML rowcount of an executed statement."""
    return int(getattr(result, "rowcount", 0) or 0)


__all__ = ["affected_rows", "insert_ignoring_conflicts"]
