"""Friend request state machine.

Per (requester, target) pair the state moves NONE -> PENDING -> FRIENDS or
back to NONE. Pending targets live in the requester's aggregate, which is
removed in the same transaction that consumes its last entry. Writers lock the
aggregate row before touching its entries.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, cast
from uuid import uuid4

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import utc_now
from db import affected_rows, ensure_locked_row_id, insert_ignoring_conflicts, lock_row_id
from models import FriendRequestAggregate, FriendRequestPending, RelationshipKind, User

from .common import col, eq
from .outcomes import OperationResult, Outcome, inconsistency
from .relationships import are_friends, form_friendship, list_peers, remove_peer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PendingRequests:
    outgoing: list[str] = field(default_factory=list)
    incoming: list[str] = field(default_factory=list)


async def _user_exists(session: AsyncSession, user_id: str) -> bool:
    result = await session.execute(select(col(User.id)).where(eq(User.id, user_id)).limit(1))
    return result.scalar_one_or_none() is not None


async def _ensure_request_aggregate_id(session: AsyncSession, requester_id: str) -> str:
    return await ensure_locked_row_id(
        session,
        FriendRequestAggregate,
        lookup={"requester_id": requester_id},
        id=str(uuid4()),
        created_at=utc_now(),
    )


async def is_request_pending(
    session: AsyncSession,
    *,
    requester_id: str,
    target_id: str,
) -> bool:
    result = await session.execute(
        select(col(FriendRequestPending.target_id))
        .join(
            FriendRequestAggregate,
            eq(FriendRequestAggregate.id, FriendRequestPending.aggregate_id),
        )
        .where(
            eq(FriendRequestAggregate.requester_id, requester_id),
            eq(FriendRequestPending.target_id, target_id),
        )
        .limit(1)
    )
    return result.scalar_one_or_none() is not None


async def _pull_pending(
    session: AsyncSession,
    *,
    requester_id: str,
    target_id: str,
) -> bool:
    """Remove one pending entry and drop the aggregate if it is now empty.

    Returns False, touching nothing, when the entry does not exist.
    """
    aggregate_id = await lock_row_id(session, FriendRequestAggregate, requester_id=requester_id)
    if aggregate_id is None:
        return False
    result = await session.execute(
        delete(FriendRequestPending)
        .where(
            eq(FriendRequestPending.aggregate_id, aggregate_id),
            eq(FriendRequestPending.target_id, target_id),
        )
        .execution_options(synchronize_session=False)
    )
    if affected_rows(result) == 0:
        return False

    has_pendings = exists(
        select(1).where(eq(FriendRequestPending.aggregate_id, FriendRequestAggregate.id))
    )
    await session.execute(
        delete(FriendRequestAggregate)
        .where(
            eq(FriendRequestAggregate.requester_id, requester_id),
            ~has_pendings,
        )
        .execution_options(synchronize_session=False)
    )
    return True


async def send_friend_request(
    session: AsyncSession,
    *,
    requester_id: str,
    target_id: str,
) -> OperationResult:
    if requester_id == target_id:
        return OperationResult.fail(Outcome.INVALID_STATE, "Cannot send a friend request to yourself")
    if not await _user_exists(session, target_id):
        return OperationResult.fail(Outcome.NOT_FOUND, "User not found")
    if await are_friends(session, user_id=requester_id, other_user_id=target_id):
        return OperationResult.fail(Outcome.ALREADY_FRIENDS, "Already friends")

    aggregate_id = await _ensure_request_aggregate_id(session, requester_id)
    result = await session.execute(
        insert_ignoring_conflicts(
            session,
            FriendRequestPending,
            aggregate_id=aggregate_id,
            target_id=target_id,
            created_at=utc_now(),
        )
    )
    await session.commit()
    if affected_rows(result) == 0:
        return OperationResult.fail(Outcome.ALREADY_PENDING, "Friend request already sent")
    return OperationResult.ack("Friend request sent")


async def accept_friend_request(
    session: AsyncSession,
    *,
    accepter_id: str,
    requester_id: str,
) -> OperationResult:
    """Consume the pending entry, then link both friend sets.

    An existing friendship still consumes the pending entry and reports
    ``ALREADY_FRIENDS``.
    """
    if not await _pull_pending(session, requester_id=requester_id, target_id=accepter_id):
        await session.commit()
        return OperationResult.fail(Outcome.REQUEST_NOT_FOUND, "Friend request not found")

    outcome = await form_friendship(session, user_id=accepter_id, friend_id=requester_id)
    await session.commit()
    if outcome is Outcome.ALREADY_FRIENDS:
        return OperationResult.fail(Outcome.ALREADY_FRIENDS, "Already friends")

    logger.info(
        "Friend request accepted",
        extra={"accepter_id": accepter_id, "requester_id": requester_id},
    )
    return OperationResult.ack("Friend request accepted")


async def decline_friend_request(
    session: AsyncSession,
    *,
    decliner_id: str,
    requester_id: str,
) -> OperationResult:
    """Drop an incoming request without creating a friendship."""
    removed = await _pull_pending(session, requester_id=requester_id, target_id=decliner_id)
    await session.commit()
    if not removed:
        return OperationResult.fail(Outcome.REQUEST_NOT_FOUND, "Friend request not found")
    return OperationResult.ack("Friend request declined")


async def cancel_friend_request(
    session: AsyncSession,
    *,
    requester_id: str,
    target_id: str,
) -> OperationResult:
    removed = await _pull_pending(session, requester_id=requester_id, target_id=target_id)
    await session.commit()
    if not removed:
        return OperationResult.fail(Outcome.REQUEST_NOT_FOUND, "Friend request not found")
    return OperationResult.ack("Friend request cancelled")


async def remove_friend(
    session: AsyncSession,
    *,
    user_id: str,
    friend_id: str,
) -> OperationResult:
    """Remove the friendship from both sides.

    Succeeds when at least one side held it; a one-sided hit means the pair
    was already inconsistent and is reported as a warning.
    """
    own_side = await remove_peer(
        session, owner_id=user_id, kind=RelationshipKind.FRIENDS, peer_id=friend_id
    )
    other_side = await remove_peer(
        session, owner_id=friend_id, kind=RelationshipKind.FRIENDS, peer_id=user_id
    )
    await session.commit()

    if own_side is Outcome.NOT_FOUND and other_side is Outcome.NOT_FOUND:
        return OperationResult.fail(Outcome.FRIENDSHIP_NOT_FOUND, "Friendship not found")
    if own_side is Outcome.NOT_FOUND or other_side is Outcome.NOT_FOUND:
        logger.warning(
            "Removed one-sided friendship",
            extra={"user_id": user_id, "friend_id": friend_id},
        )
        return OperationResult.ack(
            "Friend removed",
            inconsistency("friendship was only recorded on one side"),
        )
    return OperationResult.ack("Friend removed")


async def list_friends(session: AsyncSession, *, user_id: str) -> list[str]:
    return await list_peers(session, owner_id=user_id, kind=RelationshipKind.FRIENDS)


async def list_pending_requests(session: AsyncSession, *, user_id: str) -> PendingRequests:
    outgoing_result = await session.execute(
        select(col(FriendRequestPending.target_id))
        .join(
            FriendRequestAggregate,
            eq(FriendRequestAggregate.id, FriendRequestPending.aggregate_id),
        )
        .where(eq(FriendRequestAggregate.requester_id, user_id))
        .order_by(col(FriendRequestPending.created_at), col(FriendRequestPending.target_id))
    )
    incoming_result = await session.execute(
        select(cast(Any, col(FriendRequestAggregate.requester_id)))
        .join(
            FriendRequestPending,
            eq(FriendRequestPending.aggregate_id, FriendRequestAggregate.id),
        )
        .where(eq(FriendRequestPending.target_id, user_id))
        .order_by(col(FriendRequestPending.created_at), col(FriendRequestAggregate.requester_id))
    )
    return PendingRequests(
        outgoing=list(outgoing_result.scalars().all()),
        incoming=list(incoming_result.scalars().all()),
    )


__all__ = [
    "PendingRequests",
    "accept_friend_request",
    "cancel_friend_request",
    "decline_friend_request",
    "is_request_pending",
    "list_friends",
    "list_pending_requests",
    "remove_friend",
    "send_friend_request",
]
