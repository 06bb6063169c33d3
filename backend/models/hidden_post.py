"""Hidden post model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlmodel import Field, SQLModel

from core.clock import utc_now


class HiddenPost(SQLModel, table=True):
    """A post a user chose not to see.

    While the row exists, that user's own comments and reacts on the post are
    soft-deleted with cause ``hidden_post``.
    """

    __tablename__ = "hidden_posts"

    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    post_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("posts.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True),
            server_default=func.now(),
            nullable=False,
        ),
    )
