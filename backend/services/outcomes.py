"""Named outcomes returned by every consistency operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID_STATE = "invalid_state"


class Outcome(str, Enum):
    ACK = "ack"
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    ALREADY_FRIENDS = "already_friends"
    ALREADY_PENDING = "already_pending"
    ALREADY_ARCHIVED = "already_archived"
    ALREADY_BLOCKED = "already_blocked"
    REQUEST_NOT_FOUND = "request_not_found"
    FRIENDSHIP_NOT_FOUND = "friendship_not_found"
    INVALID_STATE = "invalid_state"

    @property
    def category(self) -> ErrorCategory | None:
        return _CATEGORIES.get(self)


_CATEGORIES: dict[Outcome, ErrorCategory] = {
    Outcome.NOT_FOUND: ErrorCategory.NOT_FOUND,
    Outcome.FRIENDSHIP_NOT_FOUND: ErrorCategory.NOT_FOUND,
    Outcome.ALREADY_EXISTS: ErrorCategory.CONFLICT,
    Outcome.ALREADY_FRIENDS: ErrorCategory.CONFLICT,
    Outcome.ALREADY_PENDING: ErrorCategory.CONFLICT,
    Outcome.ALREADY_ARCHIVED: ErrorCategory.CONFLICT,
    Outcome.ALREADY_BLOCKED: ErrorCategory.CONFLICT,
    # Accepting or declining without a matching pending entry.
    Outcome.REQUEST_NOT_FOUND: ErrorCategory.INVALID_STATE,
    Outcome.INVALID_STATE: ErrorCategory.INVALID_STATE,
}

INCONSISTENT_CASCADE = "inconsistent_cascade"


@dataclass(frozen=True, slots=True)
class OperationResult:
    """Outcome of a core operation plus any detected partial-state warnings."""

    outcome: Outcome
    detail: str
    warnings: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.ACK

    @property
    def inconsistent(self) -> bool:
        return any(warning.startswith(INCONSISTENT_CASCADE) for warning in self.warnings)

    @classmethod
    def ack(cls, detail: str, *warnings: str) -> "OperationResult":
        return cls(outcome=Outcome.ACK, detail=detail, warnings=tuple(warnings))

    @classmethod
    def fail(cls, outcome: Outcome, detail: str) -> "OperationResult":
        if outcome is Outcome.ACK:
            raise ValueError("fail() requires a non-ack outcome")
        return cls(outcome=outcome, detail=detail)


def inconsistency(message: str) -> str:
    """Format a warning for a multi-row cascade found partially applied."""
    return f"{INCONSISTENT_CASCADE}: {message}"


__all__ = [
    "ErrorCategory",
    "INCONSISTENT_CASCADE",
    "OperationResult",
    "Outcome",
    "inconsistency",
]
