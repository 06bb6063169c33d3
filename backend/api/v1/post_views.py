"""Shared post/feed view models."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from core.clock import ensure_utc
from models import Comment, Post, React
from services.feed import FeedEntry


class ImageDescriptor(BaseModel):
    """Opaque media reference; the backend never fetches it."""

    id: str
    url: str


class PostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    owner_id: str
    title: str
    description: str | None = None
    allow_comments: bool = True
    images: list[ImageDescriptor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    comment_count: int = 0
    react_count: int = 0

    @classmethod
    def from_post(
        cls,
        post: Post,
        *,
        comment_count: int = 0,
        react_count: int = 0,
    ) -> "PostResponse":
        return cls(
            id=post.id,
            owner_id=post.owner_id,
            title=post.title,
            description=post.description,
            allow_comments=post.allow_comments,
            images=[ImageDescriptor.model_validate(image) for image in post.images or []],
            tags=list(post.tags or []),
            created_at=ensure_utc(post.created_at),
            comment_count=comment_count,
            react_count=react_count,
        )

    @classmethod
    def from_feed_entry(cls, entry: FeedEntry) -> "PostResponse":
        return cls.from_post(
            entry.post,
            comment_count=entry.comment_count,
            react_count=entry.react_count,
        )


class CommentResponse(BaseModel):
    id: str
    owner_id: str
    content: str
    target_kind: str
    target_id: str
    images: list[ImageDescriptor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    created_at: datetime

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            owner_id=comment.owner_id,
            content=comment.content,
            target_kind=comment.target_kind,
            target_id=comment.target_id,
            images=[ImageDescriptor.model_validate(image) for image in comment.images or []],
            tags=list(comment.tags or []),
            created_at=ensure_utc(comment.created_at),
        )


class ReactResponse(BaseModel):
    id: str
    owner_id: str
    react_type: str
    target_kind: str
    target_id: str

    @classmethod
    def from_react(cls, react: React) -> "ReactResponse":
        return cls(
            id=react.id,
            owner_id=react.owner_id,
            react_type=react.react_type,
            target_kind=react.target_kind,
            target_id=react.target_id,
        )
