"""React (emoji reaction) model."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, func, text
from sqlmodel import Field, SQLModel

from core.clock import utc_now

from .content import ReactType


class React(SQLModel, table=True):
    """A reaction on a post or comment, addressed by a tagged target."""

    __tablename__ = "reacts"
    __table_args__ = (
        Index("ix_reacts_target", "target_kind", "target_id"),
        Index("ix_reacts_owner_target", "owner_id", "target_kind", "target_id"),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    owner_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    react_type: str = Field(
        default=ReactType.LIKE.value,
        sa_column=Column(String(16), nullable=False, server_default=ReactType.LIKE.value),
    )
    target_kind: str = Field(sa_column=Column(String(16), nullable=False))
    target_id: str = Field(sa_column=Column(String(36), nullable=False))
    is_deleted: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default=text("false")),
    )
    deleted_at: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
    deletion_cause: str | None = Field(
        default=None, sa_column=Column(String(16), nullable=True)
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )
