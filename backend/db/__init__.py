"""Database helpers."""

from .errors import is_unique_violation
from .locking import ensure_locked_row_id, lock_row_id, lock_statement
from .session import AsyncSessionMaker, async_engine
from .upsert import affected_rows, insert_ignoring_conflicts

__all__ = [
    "AsyncSessionMaker",
    "affected_rows",
    "async_engine",
    "ensure_locked_row_id",
    "insert_ignoring_conflicts",
    "is_unique_violation",
    "lock_row_id",
    "lock_statement",
]
