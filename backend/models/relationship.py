"""Per-owner relationship aggregates (friends, blocked users)."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlmodel import Field, SQLModel

from core.clock import utc_now


class RelationshipKind(str, Enum):
    FRIENDS = "friends"
    BLOCKED_USERS = "blocked_users"


class RelationshipAggregate(SQLModel, table=True):
    """One owner's set of peers of a given kind.

    The row exists only while the set is non-empty.
    """

    __tablename__ = "relationship_aggregates"
    __table_args__ = (
        UniqueConstraint(
            "owner_id",
            "kind",
            name="ux_relationship_aggregates_owner_kind",
        ),
    )

    id: str = Field(default_factory=lambda: str(uuid4()), sa_column=Column(String(36), primary_key=True))
    owner_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
        )
    )
    kind: str = Field(sa_column=Column(String(16), nullable=False))
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        ),
    )


class RelationshipMember(SQLModel, table=True):
    """A peer inside a relationship aggregate."""

    __tablename__ = "relationship_members"
    __table_args__ = (
        Index("ix_relationship_members_peer_aggregate", "peer_id", "aggregate_id"),
    )

    aggregate_id: str = Field(
        sa_column=Column(
            String(36),
            ForeignKey("relationship_aggregates.id", ondelete="CASCADE"),
            primary_key=True,
        )
    )
    peer_id: str = Field(
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
