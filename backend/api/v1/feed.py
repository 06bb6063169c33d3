"""Feed-related endpoints."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import list_feed
from .pagination import MAX_PAGE_SIZE, set_next_offset_header
from .post_views import PostResponse

router = APIRouter(prefix="/feed", tags=["feed"])


@router.get("/home", response_model=list[PostResponse])
async def home_feed(
    response: Response,
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PostResponse]:
    page = await list_feed(session, viewer_id=current_user.id, limit=limit, offset=offset)
    if limit is not None:
        set_next_offset_header(response, offset=offset, limit=limit, has_more=page.has_more)
    return [PostResponse.from_feed_entry(entry) for entry in page.entries]
