"""Per-user post archive with timestamped entries."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlmodel import Field, SQLModel

from core.clock import utc_now


class PostArchive(SQLModel, table=True):
    __tablename__ = "post_archives"

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    user_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            unique=True,
        )
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )


class ArchivedPost(SQLModel, table=True):
    """An archive entry. ``post_id`` is not a foreign key: an entry may
    outlive its post until the next sweep drops it."""

    __tablename__ = "archived_posts"
    __table_args__ = (
        Index("ix_archived_posts_archive_archived_at", "archive_id", "archived_at"),
    )

    archive_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("post_archives.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    post_id: str = Field(sa_column=Column(String(36), primary_key=True))
    archived_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )
