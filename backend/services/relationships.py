"""Per-owner relationship aggregates (friends and blocked users).

An aggregate row exists only while its member set is non-empty: members are
added with an atomic insert-or-ignore and removed with a keyed delete that is
followed, inside the same transaction, by deletion of the aggregate once no
members reference it. Both paths hold a row lock on the aggregate first, so a
concurrent add cannot land in an aggregate that is being deleted. Functions
here never commit; callers own the transaction.
"""

from __future__ import annotations

from typing import Any, cast
from uuid import uuid4

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import utc_now
from db import affected_rows, ensure_locked_row_id, insert_ignoring_conflicts, lock_row_id
from models import RelationshipAggregate, RelationshipKind, RelationshipMember

from .common import col, eq
from .outcomes import Outcome


async def get_aggregate(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
) -> RelationshipAggregate | None:
    result = await session.execute(
        select(cast(Any, RelationshipAggregate)).where(
            eq(RelationshipAggregate.owner_id, owner_id),
            eq(RelationshipAggregate.kind, kind.value),
        )
    )
    return result.scalar_one_or_none()


async def _ensure_aggregate_id(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
) -> str:
    return await ensure_locked_row_id(
        session,
        RelationshipAggregate,
        lookup={"owner_id": owner_id, "kind": kind.value},
        id=str(uuid4()),
        created_at=utc_now(),
    )


async def add_peer(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
    peer_id: str,
) -> Outcome:
    """Add ``peer_id`` to the owner's set, creating the aggregate on first use.

    Returns ``ALREADY_EXISTS`` when the peer was already a member.
    """
    aggregate_id = await _ensure_aggregate_id(session, owner_id=owner_id, kind=kind)
    result = await session.execute(
        insert_ignoring_conflicts(
            session,
            RelationshipMember,
            aggregate_id=aggregate_id,
            peer_id=peer_id,
            created_at=utc_now(),
        )
    )
    if affected_rows(result) == 0:
        return Outcome.ALREADY_EXISTS
    return Outcome.ACK


async def remove_peer(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
    peer_id: str,
) -> Outcome:
    """Pull ``peer_id`` from the owner's set; drop the aggregate when emptied."""
    aggregate_id = await lock_row_id(
        session, RelationshipAggregate, owner_id=owner_id, kind=kind.value
    )
    if aggregate_id is None:
        return Outcome.NOT_FOUND
    result = await session.execute(
        delete(RelationshipMember).where(
            eq(RelationshipMember.aggregate_id, aggregate_id),
            eq(RelationshipMember.peer_id, peer_id),
        ).execution_options(synchronize_session=False)
    )
    if affected_rows(result) == 0:
        return Outcome.NOT_FOUND

    await delete_aggregate_if_empty(session, owner_id=owner_id, kind=kind)
    return Outcome.ACK


async def delete_aggregate_if_empty(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
) -> bool:
    has_members = exists(
        select(1).where(eq(RelationshipMember.aggregate_id, RelationshipAggregate.id))
    )
    result = await session.execute(
        delete(RelationshipAggregate).where(
            eq(RelationshipAggregate.owner_id, owner_id),
            eq(RelationshipAggregate.kind, kind.value),
            ~has_members,
        ).execution_options(synchronize_session=False)
    )
    return affected_rows(result) > 0


async def has_peer(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
    peer_id: str,
) -> bool:
    result = await session.execute(
        select(col(RelationshipMember.peer_id))
        .join(
            RelationshipAggregate,
            eq(RelationshipAggregate.id, RelationshipMember.aggregate_id),
        )
        .where(
            eq(RelationshipAggregate.owner_id, owner_id),
            eq(RelationshipAggregate.kind, kind.value),
            eq(RelationshipMember.peer_id, peer_id),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def list_peers(
    session: AsyncSession,
    *,
    owner_id: str,
    kind: RelationshipKind,
) -> list[str]:
    result = await session.execute(
        select(col(RelationshipMember.peer_id))
        .join(
            RelationshipAggregate,
            eq(RelationshipAggregate.id, RelationshipMember.aggregate_id),
        )
        .where(
            eq(RelationshipAggregate.owner_id, owner_id),
            eq(RelationshipAggregate.kind, kind.value),
        )
        .order_by(col(RelationshipMember.created_at), col(RelationshipMember.peer_id))
    )
    return list(result.scalars().all())


def owners_listing_peer(kind: RelationshipKind, peer_id: str) -> Any:
    """Subquery of owner ids whose ``kind`` aggregate contains ``peer_id``."""
    return (
        select(col(RelationshipAggregate.owner_id))
        .join(
            RelationshipMember,
            eq(RelationshipMember.aggregate_id, RelationshipAggregate.id),
        )
        .where(
            eq(RelationshipAggregate.kind, kind.value),
            eq(RelationshipMember.peer_id, peer_id),
        )
    )


async def are_friends(session: AsyncSession, *, user_id: str, other_user_id: str) -> bool:
    """True when either side's friend set holds the other."""
    if await has_peer(
        session, owner_id=user_id, kind=RelationshipKind.FRIENDS, peer_id=other_user_id
    ):
        return True
    return await has_peer(
        session, owner_id=other_user_id, kind=RelationshipKind.FRIENDS, peer_id=user_id
    )


async def form_friendship(session: AsyncSession, *, user_id: str, friend_id: str) -> Outcome:
    """Link two users in both friend sets.

    If the first side already holds the peer the second insert is skipped and
    ``ALREADY_FRIENDS`` is returned, so a retry never creates a one-sided pair.
    """
    first = await add_peer(
        session, owner_id=user_id, kind=RelationshipKind.FRIENDS, peer_id=friend_id
    )
    if first is Outcome.ALREADY_EXISTS:
        return Outcome.ALREADY_FRIENDS
    await add_peer(
        session, owner_id=friend_id, kind=RelationshipKind.FRIENDS, peer_id=user_id
    )
    return Outcome.ACK


__all__ = [
    "add_peer",
    "are_friends",
    "delete_aggregate_if_empty",
    "form_friendship",
    "get_aggregate",
    "has_peer",
    "list_peers",
    "owners_listing_peer",
    "remove_peer",
]
