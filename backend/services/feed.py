"""Viewer feed and profile post listings.

All listings share the same shape: live posts only, newest first, paged with
``limit + 1`` so callers know whether another page exists.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import Post, RelationshipAggregate, User

from .account_blocks import blocked_by_owner_ids
from .common import col, desc, eq
from .content_store import Engagement, count_engagement, not_deleted
from .outcomes import OperationResult, Outcome
from .visibility import hidden_post_ids


@dataclass(slots=True)
class FeedEntry:
    post: Post
    comment_count: int = 0
    react_count: int = 0


@dataclass(slots=True)
class FeedPage:
    entries: list[FeedEntry]
    has_more: bool = False


def _active_posts() -> Any:
    return (
        select(cast(Any, Post))
        .where(not_deleted(Post))
        .order_by(desc(Post.created_at), desc(Post.id))
    )


async def _fetch_page(
    session: AsyncSession,
    query: Any,
    *,
    limit: int | None,
    offset: int,
) -> FeedPage:
    if offset > 0:
        query = query.offset(offset)
    if limit is not None:
        query = query.limit(limit + 1)

    result = await session.execute(query)
    posts = list(result.scalars().all())
    has_more = False
    if limit is not None and len(posts) > limit:
        has_more = True
        posts = posts[:limit]

    engagement = await count_engagement(session, [post.id for post in posts])
    entries = []
    for post in posts:
        counts = engagement.get(post.id, Engagement())
        entries.append(
            FeedEntry(
                post=post,
                comment_count=counts.comment_count,
                react_count=counts.react_count,
            )
        )
    return FeedPage(entries=entries, has_more=has_more)


async def list_feed(
    session: AsyncSession,
    *,
    viewer_id: str,
    limit: int | None = None,
    offset: int = 0,
) -> FeedPage:
    """Newest-first posts visible to ``viewer_id``.

    Excludes posts the viewer hid and posts whose owner blocked the viewer.
    Blocking is one-directional, so users the viewer blocked still appear.
    """
    query = _active_posts().where(
        col(Post.id).not_in(hidden_post_ids(viewer_id)),
        col(Post.owner_id).not_in(blocked_by_owner_ids(viewer_id)),
    )
    return await _fetch_page(session, query, limit=limit, offset=offset)


async def list_user_posts(
    session: AsyncSession,
    *,
    viewer_id: str,
    owner_id: str,
    limit: int | None = None,
    offset: int = 0,
) -> tuple[OperationResult, FeedPage]:
    """Another user's posts as the viewer sees them.

    An owner who blocked the viewer is reported as ``NOT_FOUND``; posts the
    viewer hid are left out.
    """
    empty = FeedPage(entries=[])
    owner = await session.execute(select(col(User.id)).where(eq(User.id, owner_id)).limit(1))
    if owner.scalar_one_or_none() is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "User not found"), empty
    blocked = await session.execute(
        blocked_by_owner_ids(viewer_id).where(eq(RelationshipAggregate.owner_id, owner_id)).limit(1)
    )
    if blocked.scalar_one_or_none() is not None:
        return OperationResult.fail(Outcome.NOT_FOUND, "User not found"), empty

    query = _active_posts().where(
        eq(Post.owner_id, owner_id),
        col(Post.id).not_in(hidden_post_ids(viewer_id)),
    )
    page = await _fetch_page(session, query, limit=limit, offset=offset)
    return OperationResult.ack("Posts listed"), page


async def list_my_posts(
    session: AsyncSession,
    *,
    user_id: str,
    limit: int | None = None,
    offset: int = 0,
) -> FeedPage:
    query = _active_posts().where(eq(Post.owner_id, user_id))
    return await _fetch_page(session, query, limit=limit, offset=offset)


__all__ = ["FeedEntry", "FeedPage", "list_feed", "list_my_posts", "list_user_posts"]
