"""Shared content enums and the polymorphic target reference."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class TargetKind(str, Enum):
    """What a comment or react is attached to."""

    POST = "post"
    COMMENT = "comment"


class ReactType(str, Enum):
    LIKE = "like"
    LOVE = "love"
    HAHA = "haha"
    CARE = "care"
    WOW = "wow"
    SAD = "sad"
    ANGRY = "angry"


class DeletionCause(str, Enum):
    """Which write path soft-deleted a row."""

    OWNER = "owner"
    HIDDEN_POST = "hidden_post"


@dataclass(frozen=True, slots=True)
class TargetRef:
    kind: TargetKind
    id: str

    @classmethod
    def post(cls, post_id: str) -> "TargetRef":
        return cls(kind=TargetKind.POST, id=post_id)

    @classmethod
    def comment(cls, comment_id: str) -> "TargetRef":
        return cls(kind=TargetKind.COMMENT, id=comment_id)
