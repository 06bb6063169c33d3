"""Hide cascade: soft-delete a user's own engagement on a hidden post.

Applying and reversing are keyed by the same (user, post) pair. Apply only
touches rows that are still live and tags them ``hidden_post``; reverse only
restores rows carrying that tag, so rows the owner deleted themselves stay
deleted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from db import affected_rows
from models import Comment, DeletionCause, React, TargetRef

from .common import eq
from .content_store import not_deleted, targets

logger = logging.getLogger(__name__)

CASCADE_MODELS: tuple[type[Comment] | type[React], ...] = (Comment, React)


@dataclass(slots=True)
class CascadeCounts:
    comments: int = 0
    reacts: int = 0

    @property
    def total(self) -> int:
        return self.comments + self.reacts


def _record(counts: CascadeCounts, model: type[Comment] | type[React], rows: int) -> None:
    if model is Comment:
        counts.comments += rows
    else:
        counts.reacts += rows


async def apply_hide_cascade(
    session: AsyncSession,
    *,
    user_id: str,
    post_id: str,
    now: datetime,
) -> CascadeCounts:
    counts = CascadeCounts()
    for model in CASCADE_MODELS:
        result = await session.execute(
            update(model)
            .where(
                eq(model.owner_id, user_id),
                targets(model, TargetRef.post(post_id)),
                not_deleted(model),
            )
            .values(
                is_deleted=True,
                deleted_at=now,
                deletion_cause=DeletionCause.HIDDEN_POST.value,
            )
            .execution_options(synchronize_session=False)
        )
        _record(counts, model, affected_rows(result))

    logger.info(
        "Applied hide cascade",
        extra={
            "user_id": user_id,
            "post_id": post_id,
            "comments": counts.comments,
            "reacts": counts.reacts,
        },
    )
    return counts


async def reverse_hide_cascade(
    session: AsyncSession,
    *,
    user_id: str,
    post_id: str,
) -> CascadeCounts:
    counts = CascadeCounts()
    for model in CASCADE_MODELS:
        result = await session.execute(
            update(model)
            .where(
                eq(model.owner_id, user_id),
                targets(model, TargetRef.post(post_id)),
                eq(model.deletion_cause, DeletionCause.HIDDEN_POST.value),
            )
            .values(is_deleted=False, deleted_at=None, deletion_cause=None)
            .execution_options(synchronize_session=False)
        )
        _record(counts, model, affected_rows(result))

    logger.info(
        "Reversed hide cascade",
        extra={
            "user_id": user_id,
            "post_id": post_id,
            "comments": counts.comments,
            "reacts": counts.reacts,
        },
    )
    return counts
