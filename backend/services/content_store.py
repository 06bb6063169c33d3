"""Soft-delete aware reads and writes over posts, comments and reacts.

Every default read goes through :func:`not_deleted`; nothing filters
implicitly. Soft-delete writers flip ``is_deleted``/``deleted_at`` and never
remove rows. Only :func:`hard_delete_post` physically deletes content.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import ColumnElement

from core.clock import utc_now
from db import affected_rows
from models import Comment, DeletionCause, Post, React, ReactType, TargetKind, TargetRef, User

from .common import col, desc, eq
from .outcomes import OperationResult, Outcome

logger = logging.getLogger(__name__)

ContentModel = type[Post] | type[Comment] | type[React]


def not_deleted(model: ContentModel) -> ColumnElement[bool]:
    """Predicate selecting rows visible to default reads."""
    return cast(ColumnElement[bool], col(model.is_deleted).is_(False))


def select_active(model: ContentModel) -> Any:
    return select(cast(Any, model)).where(not_deleted(model))


def targets(model: type[Comment] | type[React], target: TargetRef) -> ColumnElement[bool]:
    return cast(
        ColumnElement[bool],
        eq(model.target_kind, target.kind.value) & eq(model.target_id, target.id),
    )


async def get_active_post(session: AsyncSession, post_id: str) -> Post | None:
    result = await session.execute(select_active(Post).where(eq(Post.id, post_id)).limit(1))
    return result.scalar_one_or_none()


async def get_active_comment(session: AsyncSession, comment_id: str) -> Comment | None:
    result = await session.execute(
        select_active(Comment).where(eq(Comment.id, comment_id)).limit(1)
    )
    return result.scalar_one_or_none()


async def resolve_target(session: AsyncSession, target: TargetRef) -> Post | Comment | None:
    if target.kind is TargetKind.POST:
        return await get_active_post(session, target.id)
    if target.kind is TargetKind.COMMENT:
        return await get_active_comment(session, target.id)
    raise ValueError(f"Unknown target kind: {target.kind!r}")


async def _validate_tags(session: AsyncSession, tags: list[str] | None) -> list[str] | None:
    """Deduplicated tag ids, or ``None`` when a tagged user does not exist."""
    unique_tags = list(dict.fromkeys(tags or []))
    if not unique_tags:
        return []
    result = await session.execute(select(col(User.id)).where(col(User.id).in_(unique_tags)))
    if len(set(result.scalars().all())) != len(unique_tags):
        return None
    return unique_tags


def _invalid_tags() -> OperationResult:
    return OperationResult.fail(Outcome.INVALID_STATE, "Invalid tags")


async def create_post(
    session: AsyncSession,
    *,
    owner_id: str,
    title: str,
    description: str | None = None,
    allow_comments: bool = True,
    images: list[dict[str, Any]] | None = None,
    tags: list[str] | None = None,
) -> tuple[OperationResult, Post | None]:
    valid_tags = await _validate_tags(session, tags)
    if valid_tags is None:
        return _invalid_tags(), None

    post = Post(
        owner_id=owner_id,
        title=title,
        description=description,
        allow_comments=allow_comments,
        images=list(images or []),
        tags=valid_tags,
    )
    session.add(post)
    await session.commit()
    return OperationResult.ack("Post created"), post


async def update_post(
    session: AsyncSession,
    *,
    owner_id: str,
    post_id: str,
    title: str | None = None,
    description: str | None = None,
    allow_comments: bool | None = None,
    images: list[dict[str, Any]] | None = None,
    tags: list[str] | None = None,
) -> tuple[OperationResult, Post | None]:
    """Owner-only partial update; ``None`` leaves a field unchanged."""
    result = await session.execute(
        select_active(Post).where(eq(Post.id, post_id), eq(Post.owner_id, owner_id)).limit(1)
    )
    post = result.scalar_one_or_none()
    if post is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found"), None

    if tags is not None:
        valid_tags = await _validate_tags(session, tags)
        if valid_tags is None:
            return _invalid_tags(), None
        post.tags = valid_tags
    if title is not None:
        post.title = title
    if description is not None:
        post.description = description
    if allow_comments is not None:
        post.allow_comments = allow_comments
    if images is not None:
        post.images = list(images)
    await session.commit()
    return OperationResult.ack("Post updated"), post


async def add_comment(
    session: AsyncSession,
    *,
    owner_id: str,
    target: TargetRef,
    content: str,
    images: list[dict[str, Any]] | None = None,
    tags: list[str] | None = None,
) -> tuple[OperationResult, Comment | None]:
    resolved = await resolve_target(session, target)
    if resolved is None:
        return OperationResult.fail(Outcome.NOT_FOUND, f"{target.kind.value.title()} not found"), None
    if isinstance(resolved, Post) and not resolved.allow_comments:
        return OperationResult.fail(Outcome.INVALID_STATE, "Comments are disabled on this post"), None
    valid_tags = await _validate_tags(session, tags)
    if valid_tags is None:
        return _invalid_tags(), None

    comment = Comment(
        owner_id=owner_id,
        content=content,
        images=list(images or []),
        tags=valid_tags,
        target_kind=target.kind.value,
        target_id=target.id,
    )
    session.add(comment)
    await session.commit()
    return OperationResult.ack("Comment added"), comment


async def list_comments(
    session: AsyncSession,
    target: TargetRef,
) -> tuple[OperationResult, list[Comment]]:
    """Live comments on a post or comment, newest first."""
    if await resolve_target(session, target) is None:
        return OperationResult.fail(Outcome.NOT_FOUND, f"{target.kind.value.title()} not found"), []

    result = await session.execute(
        select_active(Comment)
        .where(targets(Comment, target))
        .order_by(desc(Comment.created_at), desc(Comment.id))
    )
    return OperationResult.ack("Comments listed"), list(result.scalars().all())


async def edit_comment(
    session: AsyncSession,
    *,
    owner_id: str,
    comment_id: str,
    content: str | None = None,
    images: list[dict[str, Any]] | None = None,
    tags: list[str] | None = None,
) -> tuple[OperationResult, Comment | None]:
    result = await session.execute(
        select_active(Comment)
        .where(eq(Comment.id, comment_id), eq(Comment.owner_id, owner_id))
        .limit(1)
    )
    comment = result.scalar_one_or_none()
    if comment is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "Comment not found"), None

    if tags is not None:
        valid_tags = await _validate_tags(session, tags)
        if valid_tags is None:
            return _invalid_tags(), None
        comment.tags = valid_tags
    if content is not None:
        comment.content = content
    if images is not None:
        comment.images = list(images)
    await session.commit()
    return OperationResult.ack("Comment updated"), comment


async def add_react(
    session: AsyncSession,
    *,
    owner_id: str,
    target: TargetRef,
    react_type: ReactType = ReactType.LIKE,
) -> tuple[OperationResult, React | None]:
    resolved = await resolve_target(session, target)
    if resolved is None:
        return OperationResult.fail(Outcome.NOT_FOUND, f"{target.kind.value.title()} not found"), None

    react = React(
        owner_id=owner_id,
        react_type=react_type.value,
        target_kind=target.kind.value,
        target_id=target.id,
    )
    session.add(react)
    await session.commit()
    return OperationResult.ack("React added"), react


async def _soft_delete_owned(
    session: AsyncSession,
    model: type[Comment] | type[React],
    *,
    owner_id: str,
    row_id: str,
) -> bool:
    result = await session.execute(
        select_active(model).where(eq(model.id, row_id), eq(model.owner_id, owner_id)).limit(1)
    )
    row = result.scalar_one_or_none()
    if row is None:
        return False
    row.is_deleted = True
    row.deleted_at = utc_now()
    row.deletion_cause = DeletionCause.OWNER.value
    await session.commit()
    return True


async def delete_comment(session: AsyncSession, *, owner_id: str, comment_id: str) -> OperationResult:
    if not await _soft_delete_owned(session, Comment, owner_id=owner_id, row_id=comment_id):
        return OperationResult.fail(Outcome.NOT_FOUND, "Comment not found")
    return OperationResult.ack("Comment deleted")


async def delete_react(session: AsyncSession, *, owner_id: str, react_id: str) -> OperationResult:
    if not await _soft_delete_owned(session, React, owner_id=owner_id, row_id=react_id):
        return OperationResult.fail(Outcome.NOT_FOUND, "React not found")
    return OperationResult.ack("React deleted")


async def hard_delete_post(session: AsyncSession, post_id: str) -> bool:
    """Physically delete a post and the comments attached to it.

    Reacts on the post are left in place. The caller commits. Returns False
    when no post row existed.
    """
    comments_result = await session.execute(
        delete(Comment).where(targets(Comment, TargetRef.post(post_id)))
    )
    post_result = await session.execute(delete(Post).where(eq(Post.id, post_id)))
    deleted = affected_rows(post_result) > 0
    if deleted:
        logger.info(
            "Hard-deleted post",
            extra={
                "post_id": post_id,
                "comments_deleted": affected_rows(comments_result),
                "reacts_retained": True,
            },
        )
    return deleted


async def delete_post(session: AsyncSession, *, owner_id: str, post_id: str) -> OperationResult:
    result = await session.execute(
        select(col(Post.owner_id)).where(eq(Post.id, post_id)).limit(1)
    )
    post_owner_id = result.scalar_one_or_none()
    if post_owner_id is None or post_owner_id != owner_id:
        return OperationResult.fail(Outcome.NOT_FOUND, "Post not found")

    await hard_delete_post(session, post_id)
    await session.commit()
    return OperationResult.ack("Post deleted")


@dataclass(slots=True)
class Engagement:
    comment_count: int = 0
    react_count: int = 0


async def count_engagement(session: AsyncSession, post_ids: list[str]) -> dict[str, Engagement]:
    """Comment and react counts per post, ignoring soft-deleted rows."""
    engagement = {post_id: Engagement() for post_id in post_ids}
    if not post_ids:
        return engagement

    for model in (Comment, React):
        target_id_column = col(model.target_id)
        count_column = cast(Any, func.count(col(model.id)))
        result = await session.execute(
            select(target_id_column, count_column)
            .where(
                eq(model.target_kind, TargetKind.POST.value),
                target_id_column.in_(post_ids),
                not_deleted(model),
            )
            .group_by(target_id_column)
        )
        for post_id, total in result.all():
            if model is Comment:
                engagement[post_id].comment_count = int(total)
            else:
                engagement[post_id].react_count = int(total)
    return engagement
