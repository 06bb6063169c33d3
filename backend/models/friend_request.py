"""Friend request aggregate: one row per requester plus its pending targets."""

from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, func
from sqlmodel import Field, SQLModel

from core.clock import utc_now


class FriendRequestAggregate(SQLModel, table=True):
    """Pending outgoing requests of a single requester."""

    __tablename__ = "friend_request_aggregates"

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    requester_id: str = Field(
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


class FriendRequestPending(SQLModel, table=True):
    __tablename__ = "friend_request_pendings"
    __table_args__ = (
        Index(
            "ix_friend_request_pendings_target_created_at",
            "target_id",
            "created_at",
        ),
    )

    aggregate_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("friend_request_aggregates.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    target_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )
