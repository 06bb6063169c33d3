"""Consistency services for the social graph and content visibility."""

from .account_blocks import BlockState, block_user, get_block_state, list_blocked_users, unblock_user
from .archive import ArchiveEntry, ArchiveListing, archive_post, list_archive, remove_from_archive
from .content_store import (
    add_comment,
    add_react,
    create_post,
    delete_comment,
    delete_post,
    delete_react,
    edit_comment,
    hard_delete_post,
    list_comments,
    update_post,
)
from .feed import FeedEntry, FeedPage, list_feed, list_my_posts, list_user_posts
from .friend_requests import (
    PendingRequests,
    accept_friend_request,
    cancel_friend_request,
    decline_friend_request,
    list_friends,
    list_pending_requests,
    remove_friend,
    send_friend_request,
)
from .outcomes import ErrorCategory, OperationResult, Outcome
from .visibility import (
    hide_post,
    is_post_saved,
    list_saved_posts,
    save_post,
    unhide_post,
    unsave_post,
)

__all__ = [
    "ArchiveEntry",
    "ArchiveListing",
    "BlockState",
    "ErrorCategory",
    "FeedEntry",
    "FeedPage",
    "OperationResult",
    "Outcome",
    "PendingRequests",
    "accept_friend_request",
    "add_comment",
    "add_react",
    "archive_post",
    "block_user",
    "cancel_friend_request",
    "create_post",
    "decline_friend_request",
    "delete_comment",
    "delete_post",
    "delete_react",
    "edit_comment",
    "get_block_state",
    "hard_delete_post",
    "hide_post",
    "is_post_saved",
    "list_archive",
    "list_blocked_users",
    "list_comments",
    "list_feed",
    "list_friends",
    "list_my_posts",
    "list_pending_requests",
    "list_saved_posts",
    "list_user_posts",
    "remove_friend",
    "remove_from_archive",
    "save_post",
    "send_friend_request",
    "unblock_user",
    "unhide_post",
    "unsave_post",
    "update_post",
]
