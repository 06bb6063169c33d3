"""Post archive with lazy, read-triggered expiry.

There is no scheduler: entries older than the retention window are swept
when their owner next lists the archive. Until then an expired post stays
fully live. Sweeping hard-deletes the post (and its comments) and drops the
entry; the whole sweep commits as one unit, so a listing with many expired
entries blocks its caller for all of those deletes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, cast
from uuid import uuid4

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from core import settings
from core.clock import ensure_utc, utc_now
from db import affected_rows, ensure_locked_row_id, insert_ignoring_conflicts, lock_row_id
from models import ArchivedPost, Post, PostArchive

from .common import col, eq
from .content_store import hard_delete_post, not_deleted
from .outcomes import OperationResult, Outcome, inconsistency

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ArchiveEntry:
    post_id: str
    archived_at: datetime


@dataclass(slots=True)
class ArchiveListing:
    entries: list[ArchiveEntry] = field(default_factory=list)
    expired_post_ids: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def retention_window() -> timedelta:
    return timedelta(hours=settings.archive_retention_hours)


async def _delete_archive_if_empty(session: AsyncSession, user_id: str) -> bool:
    has_entries = exists(select(1).where(eq(ArchivedPost.archive_id, PostArchive.id)))
    result = await session.execute(
        delete(PostArchive)
        .where(eq(PostArchive.user_id, user_id), ~has_entries)
        .execution_options(synchronize_session=False)
    )
    return affected_rows(result) > 0


async def archive_post(
    session: AsyncSession,
    *,
    user_id: str,
    post_id: str,
    now: datetime | None = None,
) -> OperationResult:
    """Append a post to its owner's archive.

    Only the owner may archive a post, since expiry hard-deletes it.
    """
    result = await session.execute(
        select(col(Post.owner_id)).where(eq(Post.id, post_id), not_deleted(Post)).limit(1)
    )
    if result.scalar_one_or_none() != user_id:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found")

    archived_at = now or utc_now()
    archive_id = await ensure_locked_row_id(
        session,
        PostArchive,
        lookup={"user_id": user_id},
        id=str(uuid4()),
        created_at=archived_at,
    )
    entry_result = await session.execute(
        insert_ignoring_conflicts(
            session,
            ArchivedPost,
            archive_id=archive_id,
            post_id=post_id,
            archived_at=archived_at,
        )
    )
    await session.commit()
    if affected_rows(entry_result) == 0:
        return OperationResult.fail(Outcome.ALREADY_ARCHIVED, "Post already archived")
    return OperationResult.ack("Post archived")


async def list_archive(
    session: AsyncSession,
    *,
    user_id: str,
    now: datetime | None = None,
) -> ArchiveListing:
    """Return surviving entries oldest first, sweeping expired ones.

    The archive row stays locked for the whole listing so a concurrent
    archive or removal cannot interleave with the sweep.
    """
    listing = ArchiveListing()
    archive_id = await lock_row_id(session, PostArchive, user_id=user_id)
    if archive_id is None:
        await session.commit()
        return listing

    entry_entity = cast(Any, ArchivedPost)
    result = await session.execute(
        select(entry_entity)
        .where(eq(ArchivedPost.archive_id, archive_id))
        .order_by(col(ArchivedPost.archived_at), col(ArchivedPost.post_id))
    )
    stored_entries: list[ArchivedPost] = list(result.scalars().all())

    cutoff = (now or utc_now()) - retention_window()
    for entry in stored_entries:
        archived_at = ensure_utc(entry.archived_at)
        if archived_at >= cutoff:
            listing.entries.append(ArchiveEntry(post_id=entry.post_id, archived_at=archived_at))
            continue

        if not await hard_delete_post(session, entry.post_id):
            logger.warning(
                "Archived post vanished before expiry",
                extra={"user_id": user_id, "post_id": entry.post_id},
            )
            listing.warnings.append(
                inconsistency(f"archived post {entry.post_id} no longer existed at expiry")
            )
        listing.expired_post_ids.append(entry.post_id)

    if not listing.expired_post_ids:
        await session.commit()
        return listing

    await session.execute(
        delete(ArchivedPost)
        .where(
            eq(ArchivedPost.archive_id, archive_id),
            col(ArchivedPost.post_id).in_(listing.expired_post_ids),
        )
        .execution_options(synchronize_session=False)
    )
    await _delete_archive_if_empty(session, user_id)
    await session.commit()
    logger.info(
        "Swept expired archive entries",
        extra={"user_id": user_id, "expired": len(listing.expired_post_ids)},
    )
    return listing


async def remove_from_archive(
    session: AsyncSession,
    *,
    user_id: str,
    post_id: str,
) -> OperationResult:
    """Pull an entry without touching the post itself."""
    archive_id = await lock_row_id(session, PostArchive, user_id=user_id)
    if archive_id is None:
        await session.commit()
        return OperationResult.ack("Post removed from archive")
    await session.execute(
        delete(ArchivedPost)
        .where(
            eq(ArchivedPost.archive_id, archive_id),
            eq(ArchivedPost.post_id, post_id),
        )
        .execution_options(synchronize_session=False)
    )
    await _delete_archive_if_empty(session, user_id)
    await session.commit()
    return OperationResult.ack("Post removed from archive")


__all__ = [
    "ArchiveEntry",
    "ArchiveListing",
    "archive_post",
    "list_archive",
    "remove_from_archive",
    "retention_window",
]
