"""Translate core operation outcomes into HTTP responses."""

from __future__ import annotations

from fastapi import HTTPException, status
from pydantic import BaseModel

from services.outcomes import ErrorCategory, OperationResult

CATEGORY_STATUS = {
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
}


class MutationResponse(BaseModel):
    detail: str
    outcome: str
    warnings: list[str] = []


def to_response(result: OperationResult) -> MutationResponse:
    """Return the ack body, or raise the HTTP error matching the outcome."""
    category = result.outcome.category
    if category is not None:
        raise HTTPException(
            status_code=CATEGORY_STATUS[category],
            detail={"detail": result.detail, "outcome": result.outcome.value},
        )
    return MutationResponse(
        detail=result.detail,
        outcome=result.outcome.value,
        warnings=list(result.warnings),
    )
