"""SQLModel models package."""

from .archive import ArchivedPost, PostArchive
from .comment import Comment
from .content import DeletionCause, ReactType, TargetKind, TargetRef
from .friend_request import FriendRequestAggregate, FriendRequestPending
from .hidden_post import HiddenPost
from .post import Post
from .react import React
from .relationship import RelationshipAggregate, RelationshipKind, RelationshipMember
from .saved_post import SavedPost
from .user import User

__all__ = [
    "User",
    "Post",
    "Comment",
    "React",
    "TargetKind",
    "TargetRef",
    "ReactType",
    "DeletionCause",
    "RelationshipAggregate",
    "RelationshipMember",
    "RelationshipKind",
    "FriendRequestAggregate",
    "FriendRequestPending",
    "HiddenPost",
    "SavedPost",
    "PostArchive",
    "ArchivedPost",
]
