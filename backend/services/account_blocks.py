"""Helpers and business logic for user block relationships.

Blocks are stored in the owner's ``BLOCKED_USERS`` relationship aggregate and
are one-directional: blocking someone never blocks you back.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, cast

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from models import RelationshipKind, User

from .common import eq
from .outcomes import OperationResult, Outcome
from .relationships import add_peer, has_peer, list_peers, owners_listing_peer, remove_peer

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class BlockState:
    is_blocked: bool
    is_blocked_by: bool


async def find_user_by_email(session: AsyncSession, email: str) -> User | None:
    normalized_email = email.strip().lower()
    result = await session.execute(
        select(cast(Any, User)).where(eq(func.lower(User.email), normalized_email)).limit(1)
    )
    return result.scalar_one_or_none()


async def get_block_state(
    session: AsyncSession,
    *,
    viewer_id: str,
    target_id: str,
) -> BlockState:
    if viewer_id == target_id:
        return BlockState(is_blocked=False, is_blocked_by=False)

    is_blocked = await has_peer(
        session,
        owner_id=viewer_id,
        kind=RelationshipKind.BLOCKED_USERS,
        peer_id=target_id,
    )
    is_blocked_by = await has_peer(
        session,
        owner_id=target_id,
        kind=RelationshipKind.BLOCKED_USERS,
        peer_id=viewer_id,
    )
    return BlockState(is_blocked=is_blocked, is_blocked_by=is_blocked_by)


def blocked_by_owner_ids(viewer_id: str) -> Any:
    """Subquery of users who have the viewer in their blocked set."""
    return owners_listing_peer(RelationshipKind.BLOCKED_USERS, viewer_id)


async def block_user(
    session: AsyncSession,
    *,
    user_id: str,
    peer_email: str,
) -> OperationResult:
    peer = await find_user_by_email(session, peer_email)
    if peer is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "User not found")
    if peer.id == user_id:
        return OperationResult.fail(Outcome.INVALID_STATE, "Cannot block yourself")

    outcome = await add_peer(
        session,
        owner_id=user_id,
        kind=RelationshipKind.BLOCKED_USERS,
        peer_id=peer.id,
    )
    await session.commit()
    if outcome is Outcome.ALREADY_EXISTS:
        return OperationResult.fail(Outcome.ALREADY_BLOCKED, "Already blocked")

    logger.info("User blocked", extra={"user_id": user_id, "blocked_id": peer.id})
    return OperationResult.ack("User blocked")


async def unblock_user(
    session: AsyncSession,
    *,
    user_id: str,
    peer_email: str,
) -> OperationResult:
    peer = await find_user_by_email(session, peer_email)
    if peer is None:
        return OperationResult.fail(Outcome.NOT_FOUND, "User not found")

    outcome = await remove_peer(
        session,
        owner_id=user_id,
        kind=RelationshipKind.BLOCKED_USERS,
        peer_id=peer.id,
    )
    await session.commit()
    if outcome is Outcome.NOT_FOUND:
        return OperationResult.fail(Outcome.NOT_FOUND, "User was not blocked")
    return OperationResult.ack("User unblocked")


async def list_blocked_users(session: AsyncSession, *, user_id: str) -> list[str]:
    return await list_peers(session, owner_id=user_id, kind=RelationshipKind.BLOCKED_USERS)


__all__ = [
    "BlockState",
    "block_user",
    "blocked_by_owner_ids",
    "find_user_by_email",
    "get_block_state",
    "list_blocked_users",
    "unblock_user",
]
