"""Tests for hidden/saved posts and the hide cascade."""

from datetime import timedelta

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.clock import ensure_utc, utc_now
from models import Comment, DeletionCause, HiddenPost, React, TargetRef
from services import (
    add_comment,
    add_react,
    delete_comment,
    hide_post,
    list_feed,
    list_saved_posts,
    save_post,
    unhide_post,
    unsave_post,
)
from services.outcomes import Outcome
from services.visibility import is_post_hidden, is_post_saved


async def _reload(session: AsyncSession, model, row_id: str):
    return await session.get(model, row_id, populate_existing=True)


@pytest.mark.asyncio
async def test_hide_then_unhide_restores_exact_state(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    post = await make_post(bob)
    target = TargetRef.post(post.id)

    _, live_comment = await add_comment(
        db_session, owner_id=alice.id, target=target, content="nice"
    )
    _, removed_comment = await add_comment(
        db_session, owner_id=alice.id, target=target, content="oops"
    )
    _, react = await add_react(db_session, owner_id=alice.id, target=target)
    assert live_comment is not None and removed_comment is not None and react is not None
    await delete_comment(db_session, owner_id=alice.id, comment_id=removed_comment.id)
    removed_before = await _reload(db_session, Comment, removed_comment.id)
    removed_deleted_at = removed_before.deleted_at

    hidden = await hide_post(db_session, user_id=alice.id, post_id=post.id)
    assert hidden.ok
    assert await is_post_hidden(db_session, user_id=alice.id, post_id=post.id)

    hidden_comment = await _reload(db_session, Comment, live_comment.id)
    hidden_react = await _reload(db_session, React, react.id)
    assert hidden_comment.is_deleted and hidden_comment.deleted_at is not None
    assert hidden_comment.deletion_cause == DeletionCause.HIDDEN_POST.value
    assert hidden_react.is_deleted

    unhidden = await unhide_post(db_session, user_id=alice.id, post_id=post.id)
    assert unhidden.ok
    assert unhidden.warnings == ()
    assert not await is_post_hidden(db_session, user_id=alice.id, post_id=post.id)

    restored_comment = await _reload(db_session, Comment, live_comment.id)
    restored_react = await _reload(db_session, React, react.id)
    still_removed = await _reload(db_session, Comment, removed_comment.id)
    assert not restored_comment.is_deleted and restored_comment.deleted_at is None
    assert restored_comment.deletion_cause is None
    assert not restored_react.is_deleted and restored_react.deleted_at is None
    # A comment its owner deleted stays deleted, with its original timestamp.
    assert still_removed.is_deleted
    assert still_removed.deletion_cause == DeletionCause.OWNER.value
    assert ensure_utc(still_removed.deleted_at) == ensure_utc(removed_deleted_at)


@pytest.mark.asyncio
async def test_hide_cascade_is_scoped_to_the_hiding_user(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    u1 = await make_user("u1")
    u2 = await make_user("u2")
    post = await make_post(u2)
    target = TargetRef.post(post.id)
    _, u1_comment = await add_comment(db_session, owner_id=u1.id, target=target, content="hi")
    _, u2_comment = await add_comment(db_session, owner_id=u2.id, target=target, content="thanks")
    assert u1_comment is not None and u2_comment is not None

    await hide_post(db_session, user_id=u1.id, post_id=post.id)

    u1_feed = await list_feed(db_session, viewer_id=u1.id)
    assert post.id not in [entry.post.id for entry in u1_feed.entries]

    u2_feed = await list_feed(db_session, viewer_id=u2.id)
    assert [entry.post.id for entry in u2_feed.entries] == [post.id]
    assert not (await _reload(db_session, Comment, u2_comment.id)).is_deleted
    # U1's row is soft-deleted, never removed, so unhiding brings it back.
    assert (await _reload(db_session, Comment, u1_comment.id)).is_deleted

    await unhide_post(db_session, user_id=u1.id, post_id=post.id)
    u2_feed = await list_feed(db_session, viewer_id=u2.id)
    assert u2_feed.entries[0].comment_count == 2


@pytest.mark.asyncio
async def test_hide_and_unhide_are_idempotent(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    post = await make_post(alice)

    assert (await hide_post(db_session, user_id=alice.id, post_id=post.id)).ok
    assert (await hide_post(db_session, user_id=alice.id, post_id=post.id)).ok
    assert (await unhide_post(db_session, user_id=alice.id, post_id=post.id)).ok
    assert (await unhide_post(db_session, user_id=alice.id, post_id=post.id)).ok
    assert await db_session.get(HiddenPost, (alice.id, post.id)) is None


@pytest.mark.asyncio
async def test_hide_missing_post_is_not_found(db_session: AsyncSession, make_user):
    alice = await make_user("alice")

    result = await hide_post(db_session, user_id=alice.id, post_id="missing")

    assert result.outcome is Outcome.NOT_FOUND


@pytest.mark.asyncio
async def test_unhide_reports_tagged_rows_without_entry(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    post = await make_post(alice)
    comment = Comment(
        owner_id=alice.id,
        content="orphaned",
        target_kind="post",
        target_id=post.id,
        is_deleted=True,
        deleted_at=utc_now(),
        deletion_cause=DeletionCause.HIDDEN_POST.value,
    )
    db_session.add(comment)
    await db_session.commit()

    result = await unhide_post(db_session, user_id=alice.id, post_id=post.id)

    assert result.ok
    assert result.inconsistent
    assert not (await _reload(db_session, Comment, comment.id)).is_deleted


@pytest.mark.asyncio
async def test_save_unsave_and_list_saved_posts(
    db_session: AsyncSession,
    make_user,
    make_post,
):
    alice = await make_user("alice")
    bob = await make_user("bob")
    now = utc_now()
    older = await make_post(bob, title="older", created_at=now - timedelta(hours=2))
    newer = await make_post(bob, title="newer", created_at=now - timedelta(hours=1))

    assert (await save_post(db_session, user_id=alice.id, post_id=newer.id)).ok
    assert (await save_post(db_session, user_id=alice.id, post_id=older.id)).ok
    assert (await save_post(db_session, user_id=alice.id, post_id=older.id)).ok
    assert await is_post_saved(db_session, user_id=alice.id, post_id=older.id)

    saved = await list_saved_posts(db_session, user_id=alice.id)
    assert [post.id for post in saved] == [older.id, newer.id]

    assert (await unsave_post(db_session, user_id=alice.id, post_id=older.id)).ok
    assert [post.id for post in await list_saved_posts(db_session, user_id=alice.id)] == [newer.id]

    missing = await save_post(db_session, user_id=alice.id, post_id="missing")
    assert missing.outcome is Outcome.NOT_FOUND
