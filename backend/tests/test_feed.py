"""Tests for the viewer feed and profile post listings."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import utc_now
from models import TargetRef
from services import (
    add_comment,
    add_react,
    block_user,
    delete_post,
    delete_react,
    hide_post,
    list_feed,
    list_my_posts,
    list_user_posts,
)
from services.outcomes import Outcome


@pytest.mark.asyncio
async def test_feed_is_newest_first_and_paginates(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    now = utc_now()
    posts = [
        await make_post(bob, title=f"post {index}", created_at=now - timedelta(minutes=10 - index))
        for index in range(3)
    ]

    page = await list_feed(db_session, viewer_id=alice.id)
    assert [entry.post.id for entry in page.entries] == [post.id for post in reversed(posts)]
    assert page.has_more is False

    first_page = await list_feed(db_session, viewer_id=alice.id, limit=2)
    assert [entry.post.id for entry in first_page.entries] == [posts[2].id, posts[1].id]
    assert first_page.has_more is True

    second_page = await list_feed(db_session, viewer_id=alice.id, limit=2, offset=2)
    assert [entry.post.id for entry in second_page.entries] == [posts[0].id]
    assert second_page.has_more is False


@pytest.mark.asyncio
async def test_feed_excludes_hidden_posts(db_session: AsyncSession, make_user, make_post):
    alice = await make_user("alice")
    bob = await make_user("bob")
    kept = await make_post(bob, title="kept")
    hidden = await make_post(bob, title="hidden")

    await hide_post(db_session, user_id=alice.id, post_id=hidden.id)

    alice_feed = await list_feed(db_session, viewer_id=alice.id)
    assert [entry.post.id for entry in alice_feed.entries] == [kept.id]
    bob_feed = await list_feed(db_session, viewer_id=bob.id)
    assert {entry.post.id for entry in bob_feed.entries} == {kept.id, hidden.id}


@pytest.mark.asyncio
async def test_block_is_one_directional_in_feed(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    u1 = await make_user("u1")
    u2 = await make_user("u2")
    u1_post = await make_post(u1, title="from u1")
    u2_post = await make_post(u2, title="from u2")

    result = await block_user(db_session, user_id=u1.id, peer_email=u2.email)
    assert result.ok

    # The blocker's posts disappear for the blocked user only.
    u2_feed = await list_feed(db_session, viewer_id=u2.id)
    assert [entry.post.id for entry in u2_feed.entries] == [u2_post.id]
    u1_feed = await list_feed(db_session, viewer_id=u1.id)
    assert {entry.post.id for entry in u1_feed.entries} == {u1_post.id, u2_post.id}

    await block_user(db_session, user_id=u2.id, peer_email=u1.email)
    u1_feed = await list_feed(db_session, viewer_id=u1.id)
    assert [entry.post.id for entry in u1_feed.entries] == [u1_post.id]


@pytest.mark.asyncio
async def test_feed_counts_skip_soft_deleted_engagement(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await make_post(bob)
    target = TargetRef.post(post.id)
    await add_comment(db_session, owner_id=alice.id, target=target, content="one")
    await add_comment(db_session, owner_id=bob.id, target=target, content="two")
    _, react = await add_react(db_session, owner_id=alice.id, target=target)
    await add_react(db_session, owner_id=bob.id, target=target)
    assert react is not None
    await delete_react(db_session, owner_id=alice.id, react_id=react.id)

    feed = await list_feed(db_session, viewer_id=bob.id)

    assert len(feed.entries) == 1
    assert feed.entries[0].comment_count == 2
    assert feed.entries[0].react_count == 1


@pytest.mark.asyncio
async def test_user_posts_skip_hidden_and_other_owners(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    now = utc_now()
    older = await make_post(bob, title="older", created_at=now - timedelta(minutes=5))
    newer = await make_post(bob, title="newer", created_at=now - timedelta(minutes=1))
    hidden = await make_post(bob, title="hidden")
    await make_post(alice, title="not bob's")
    await hide_post(db_session, user_id=alice.id, post_id=hidden.id)

    result, page = await list_user_posts(db_session, viewer_id=alice.id, owner_id=bob.id)
    assert result.ok
    assert [entry.post.id for entry in page.entries] == [newer.id, older.id]

    result, first_page = await list_user_posts(
        db_session, viewer_id=alice.id, owner_id=bob.id, limit=1
    )
    assert [entry.post.id for entry in first_page.entries] == [newer.id]
    assert first_page.has_more is True


@pytest.mark.asyncio
async def test_user_posts_refused_when_owner_blocked_viewer(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    bob_post = await make_post(bob)
    alice_post = await make_post(alice)
    await block_user(db_session, user_id=bob.id, peer_email=alice.email)

    refused, page = await list_user_posts(db_session, viewer_id=alice.id, owner_id=bob.id)
    assert refused.outcome is Outcome.NOT_FOUND
    assert page.entries == []

    # Blocking is one-directional: the blocker still sees the blocked user's posts.
    result, page = await list_user_posts(db_session, viewer_id=bob.id, owner_id=alice.id)
    assert result.ok
    assert [entry.post.id for entry in page.entries] == [alice_post.id]

    result, own = await list_user_posts(db_session, viewer_id=bob.id, owner_id=bob.id)
    assert [entry.post.id for entry in own.entries] == [bob_post.id]

    unknown, _ = await list_user_posts(db_session, viewer_id=alice.id, owner_id="missing-user")
    assert unknown.outcome is Outcome.NOT_FOUND


@pytest.mark.asyncio
async def test_my_posts_lists_only_live_own_posts(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    kept = await make_post(alice, title="kept")
    removed = await make_post(alice, title="removed")
    await make_post(bob, title="bob's")
    await add_comment(db_session, owner_id=bob.id, target=TargetRef.post(kept.id), content="hi")
    assert (await delete_post(db_session, owner_id=alice.id, post_id=removed.id)).ok

    page = await list_my_posts(db_session, user_id=alice.id)

    assert [entry.post.id for entry in page.entries] == [kept.id]
    assert page.entries[0].comment_count == 1
