"""Tests for the friend request state machine."""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from models import (
    FriendRequestAggregate,
    FriendRequestPending,
    RelationshipAggregate,
    RelationshipKind,
)
from services import (
    accept_friend_request,
    cancel_friend_request,
    decline_friend_request,
    list_friends,
    list_pending_requests,
    remove_friend,
    send_friend_request,
)
from services.outcomes import ErrorCategory, Outcome
from services.relationships import add_peer


async def _request_rows(session: AsyncSession) -> tuple[list, list]:
    aggregates = (await session.execute(select(FriendRequestAggregate))).scalars().all()
    pendings = (await session.execute(select(FriendRequestPending))).scalars().all()
    return list(aggregates), list(pendings)


@pytest.mark.asyncio
async def test_send_then_accept_makes_symmetric_friends(db_session: AsyncSession, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")

    sent = await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)
    assert sent.ok

    pending = await list_pending_requests(db_session, user_id=bob.id)
    assert pending.incoming == [alice.id]
    assert pending.outgoing == []

    accepted = await accept_friend_request(db_session, accepter_id=bob.id, requester_id=alice.id)
    assert accepted.ok

    assert await list_friends(db_session, user_id=alice.id) == [bob.id]
    assert await list_friends(db_session, user_id=bob.id) == [alice.id]
    assert (await list_pending_requests(db_session, user_id=alice.id)).outgoing == []
    # The emptied request aggregate is gone.
    assert await _request_rows(db_session) == ([], [])


@pytest.mark.asyncio
async def test_accept_without_request_mutates_nothing(db_session: AsyncSession, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    await send_friend_request(db_session, requester_id=alice.id, target_id=carol.id)

    result = await accept_friend_request(db_session, accepter_id=bob.id, requester_id=alice.id)

    assert result.outcome is Outcome.REQUEST_NOT_FOUND
    assert result.outcome.category is ErrorCategory.INVALID_STATE
    aggregates, pendings = await _request_rows(db_session)
    assert len(aggregates) == 1
    assert [row.target_id for row in pendings] == [carol.id]
    friend_aggregates = (await db_session.execute(select(RelationshipAggregate))).scalars().all()
    assert friend_aggregates == []


@pytest.mark.asyncio
async def test_send_request_outcomes(db_session: AsyncSession, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")

    self_request = await send_friend_request(db_session, requester_id=alice.id, target_id=alice.id)
    assert self_request.outcome is Outcome.INVALID_STATE

    missing = await send_friend_request(db_session, requester_id=alice.id, target_id="missing")
    assert missing.outcome is Outcome.NOT_FOUND

    assert (await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)).ok
    duplicate = await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)
    assert duplicate.outcome is Outcome.ALREADY_PENDING
    assert duplicate.outcome.category is ErrorCategory.CONFLICT

    await accept_friend_request(db_session, accepter_id=bob.id, requester_id=alice.id)
    already = await send_friend_request(db_session, requester_id=bob.id, target_id=alice.id)
    assert already.outcome is Outcome.ALREADY_FRIENDS


@pytest.mark.asyncio
async def test_accept_when_already_friends_still_consumes_request(
    db_session: AsyncSession,
    make_user,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)
    await add_peer(db_session, owner_id=bob.id, kind=RelationshipKind.FRIENDS, peer_id=alice.id)
    await db_session.commit()

    result = await accept_friend_request(db_session, accepter_id=bob.id, requester_id=alice.id)

    assert result.outcome is Outcome.ALREADY_FRIENDS
    assert await _request_rows(db_session) == ([], [])


@pytest.mark.asyncio
async def test_decline_and_cancel_remove_pending_without_friendship(
    db_session: AsyncSession,
    make_user,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")
    await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)
    await send_friend_request(db_session, requester_id=alice.id, target_id=carol.id)

    declined = await decline_friend_request(db_session, decliner_id=bob.id, requester_id=alice.id)
    assert declined.ok
    assert (await list_pending_requests(db_session, user_id=alice.id)).outgoing == [carol.id]

    cancelled = await cancel_friend_request(db_session, requester_id=alice.id, target_id=carol.id)
    assert cancelled.ok
    assert await _request_rows(db_session) == ([], [])
    assert await list_friends(db_session, user_id=alice.id) == []

    again = await cancel_friend_request(db_session, requester_id=alice.id, target_id=carol.id)
    assert again.outcome is Outcome.REQUEST_NOT_FOUND


@pytest.mark.asyncio
async def test_remove_friend(db_session: AsyncSession, make_user):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await send_friend_request(db_session, requester_id=alice.id, target_id=bob.id)
    await accept_friend_request(db_session, accepter_id=bob.id, requester_id=alice.id)

    removed = await remove_friend(db_session, user_id=bob.id, friend_id=alice.id)
    assert removed.ok
    assert removed.warnings == ()
    assert await list_friends(db_session, user_id=alice.id) == []
    assert await list_friends(db_session, user_id=bob.id) == []

    missing = await remove_friend(db_session, user_id=bob.id, friend_id=alice.id)
    assert missing.outcome is Outcome.FRIENDSHIP_NOT_FOUND


@pytest.mark.asyncio
async def test_remove_one_sided_friendship_reports_inconsistency(
    db_session: AsyncSession,
    make_user,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    await add_peer(db_session, owner_id=alice.id, kind=RelationshipKind.FRIENDS, peer_id=bob.id)
    await db_session.commit()

    result = await remove_friend(db_session, user_id=bob.id, friend_id=alice.id)

    assert result.ok
    assert result.inconsistent
    assert await list_friends(db_session, user_id=alice.id) == []


@pytest.mark.asyncio
async def test_request_after_other_session_declined_last_one_recreates_aggregate(
    session_maker,
    make_user,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    carol = await make_user("carol")

    async with session_maker() as session_a, session_maker() as session_b:
        assert (await send_friend_request(session_a, requester_id=alice.id, target_id=bob.id)).ok
        stale_aggregates, _ = await _request_rows(session_a)
        assert len(stale_aggregates) == 1
        stale_id = stale_aggregates[0].id

        declined = await decline_friend_request(
            session_b, decliner_id=bob.id, requester_id=alice.id
        )
        assert declined.ok

        sent = await send_friend_request(session_a, requester_id=alice.id, target_id=carol.id)
        assert sent.ok

    async with session_maker() as session:
        aggregates, pendings = await _request_rows(session)
        assert len(aggregates) == 1
        assert aggregates[0].id != stale_id
        assert [(pending.aggregate_id, pending.target_id) for pending in pendings] == [
            (aggregates[0].id, carol.id)
        ]
