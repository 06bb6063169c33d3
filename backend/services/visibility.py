"""Per-user visibility overlay: hidden and saved posts."""

from __future__ import annotations

import logging
from typing import Any, cast

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import utc_now
from db import affected_rows, insert_ignoring_conflicts
from models import HiddenPost, Post, SavedPost

from .cascade import apply_hide_cascade, reverse_hide_cascade
from .common import col, desc, eq
from .content_store import get_active_post, not_deleted
from .outcomes import OperationResult, Outcome, inconsistency

logger = logging.getLogger(__name__)


async def hide_post(session: AsyncSession, *, user_id: str, post_id: str) -> OperationResult:
    """Hide a post for one user and soft-delete that user's engagement on it.

    The entry upsert and the cascade commit together. Hiding twice is a no-op.
    """
    if await get_active_post(session, post_id) is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found")

    now = utc_now()
    await session.execute(
        insert_ignoring_conflicts(
            session,
            HiddenPost,
            user_id=user_id,
            post_id=post_id,
            created_at=now,
        )
    )
    await apply_hide_cascade(session, user_id=user_id, post_id=post_id, now=now)
    await session.commit()
    return OperationResult.ack("Post hidden")


async def unhide_post(session: AsyncSession, *, user_id: str, post_id: str) -> OperationResult:
    """Delete the hide entry and restore the rows its cascade soft-deleted.

    Unhiding a post that was never hidden is a silent no-op, unless tagged
    rows are found without an entry, which is surfaced as a warning.
    """
    result = await session.execute(
        delete(HiddenPost)
        .where(eq(HiddenPost.user_id, user_id), eq(HiddenPost.post_id, post_id))
        .execution_options(synchronize_session=False)
    )
    entry_existed = affected_rows(result) > 0
    counts = await reverse_hide_cascade(session, user_id=user_id, post_id=post_id)
    await session.commit()

    if not entry_existed and counts.total > 0:
        logger.warning(
            "Restored hidden engagement without a hide entry",
            extra={"user_id": user_id, "post_id": post_id, "rows": counts.total},
        )
        return OperationResult.ack(
            "Post unhidden",
            inconsistency("engagement was soft-deleted without a hide entry"),
        )
    return OperationResult.ack("Post unhidden")


def hidden_post_ids(user_id: str) -> Any:
    """Subquery of post ids the user has hidden."""
    return select(col(HiddenPost.post_id)).where(eq(HiddenPost.user_id, user_id))


async def is_post_hidden(session: AsyncSession, *, user_id: str, post_id: str) -> bool:
    result = await session.execute(
        select(col(HiddenPost.post_id))
        .where(eq(HiddenPost.user_id, user_id), eq(HiddenPost.post_id, post_id))
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def save_post(session: AsyncSession, *, user_id: str, post_id: str) -> OperationResult:
    if await get_active_post(session, post_id) is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found")

    await session.execute(
        insert_ignoring_conflicts(
            session,
            SavedPost,
            user_id=user_id,
            post_id=post_id,
            created_at=utc_now(),
        )
    )
    await session.commit()
    return OperationResult.ack("Post saved")


async def unsave_post(session: AsyncSession, *, user_id: str, post_id: str) -> OperationResult:
    if await get_active_post(session, post_id) is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found")

    await session.execute(
        delete(SavedPost)
        .where(eq(SavedPost.user_id, user_id), eq(SavedPost.post_id, post_id))
        .execution_options(synchronize_session=False)
    )
    await session.commit()
    return OperationResult.ack("Post unsaved")


async def is_post_saved(session: AsyncSession, *, user_id: str, post_id: str) -> bool:
    result = await session.execute(
        select(col(SavedPost.post_id))
        .where(eq(SavedPost.user_id, user_id), eq(SavedPost.post_id, post_id))
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def list_saved_posts(session: AsyncSession, *, user_id: str) -> list[Post]:
    """Saved posts, most recently saved first; soft-deleted posts are skipped."""
    post_entity = cast(Any, Post)
    result = await session.execute(
        select(post_entity)
        .join(SavedPost, eq(SavedPost.post_id, Post.id))
        .where(eq(SavedPost.user_id, user_id), not_deleted(Post))
        .order_by(desc(SavedPost.created_at), desc(Post.id))
    )
    return list(result.scalars().all())


__all__ = [
    "hidden_post_ids",
    "hide_post",
    "is_post_hidden",
    "is_post_saved",
    "list_saved_posts",
    "save_post",
    "unhide_post",
    "unsave_post",
]
