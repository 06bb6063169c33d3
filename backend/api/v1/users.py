"""User-facing endpoints: friends, friend requests, blocks and profile posts."""

from __future__ import annotations

from typing import Annotated, Any, cast

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from pydantic import BaseModel, ConfigDict, EmailStr
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import account_blocks, feed, friend_requests
from services.common import col, eq
from services.relationships import are_friends
from .pagination import MAX_PAGE_SIZE, set_next_offset_header
from .post_views import PostResponse
from .results import MutationResponse, to_response

router = APIRouter(tags=["users"])


class UserSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    username: str
    name: str | None = None


class PendingRequestsResponse(BaseModel):
    outgoing: list[UserSummary]
    incoming: list[UserSummary]


class BlockRequest(BaseModel):
    email: EmailStr


class RelationshipStatusResponse(BaseModel):
    is_friend: bool = False
    request_sent: bool = False
    request_received: bool = False
    is_blocked: bool = False
    is_blocked_by: bool = False


async def _load_users(session: AsyncSession, user_ids: list[str]) -> list[UserSummary]:
    """Load user summaries, keeping the order of ``user_ids``."""
    if not user_ids:
        return []
    result = await session.execute(
        select(cast(Any, User)).where(col(User.id).in_(user_ids))
    )
    users_by_id = {user.id: user for user in result.scalars().all()}
    return [
        UserSummary.model_validate(users_by_id[user_id])
        for user_id in user_ids
        if user_id in users_by_id
    ]


async def _require_user(session: AsyncSession, user_id: str) -> User:
    result = await session.execute(
        select(cast(Any, User)).where(eq(User.id, user_id)).limit(1)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/me", response_model=UserSummary)
async def read_current_user(current_user: User = Depends(get_current_user)) -> UserSummary:
    return UserSummary.model_validate(current_user)


@router.get("/me/friends", response_model=list[UserSummary])
async def list_friends(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[UserSummary]:
    friend_ids = await friend_requests.list_friends(session, user_id=current_user.id)
    return await _load_users(session, friend_ids)


@router.delete("/me/friends/{friend_id}", response_model=MutationResponse)
async def remove_friend(
    friend_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await friend_requests.remove_friend(
        session, user_id=current_user.id, friend_id=friend_id
    )
    return to_response(result)


@router.get("/me/friend-requests", response_model=PendingRequestsResponse)
async def list_friend_requests(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PendingRequestsResponse:
    pending = await friend_requests.list_pending_requests(session, user_id=current_user.id)
    return PendingRequestsResponse(
        outgoing=await _load_users(session, pending.outgoing),
        incoming=await _load_users(session, pending.incoming),
    )


@router.post(
    "/me/friend-requests/{requester_id}/accept",
    response_model=MutationResponse,
)
async def accept_friend_request(
    requester_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await friend_requests.accept_friend_request(
        session, accepter_id=current_user.id, requester_id=requester_id
    )
    return to_response(result)


@router.post(
    "/me/friend-requests/{requester_id}/decline",
    response_model=MutationResponse,
)
async def decline_friend_request(
    requester_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await friend_requests.decline_friend_request(
        session, decliner_id=current_user.id, requester_id=requester_id
    )
    return to_response(result)


@router.post("/users/{user_id}/friend-request", response_model=MutationResponse)
async def send_friend_request(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await friend_requests.send_friend_request(
        session, requester_id=current_user.id, target_id=user_id
    )
    return to_response(result)


@router.delete("/users/{user_id}/friend-request", response_model=MutationResponse)
async def cancel_friend_request(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await friend_requests.cancel_friend_request(
        session, requester_id=current_user.id, target_id=user_id
    )
    return to_response(result)


@router.get("/users/{user_id}/relationship", response_model=RelationshipStatusResponse)
async def read_relationship_status(
    user_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> RelationshipStatusResponse:
    target = await _require_user(session, user_id)
    if target.id == current_user.id:
        return RelationshipStatusResponse()

    block_state = await account_blocks.get_block_state(
        session, viewer_id=current_user.id, target_id=target.id
    )
    return RelationshipStatusResponse(
        is_friend=await are_friends(session, user_id=current_user.id, other_user_id=target.id),
        request_sent=await friend_requests.is_request_pending(
            session, requester_id=current_user.id, target_id=target.id
        ),
        request_received=await friend_requests.is_request_pending(
            session, requester_id=target.id, target_id=current_user.id
        ),
        is_blocked=block_state.is_blocked,
        is_blocked_by=block_state.is_blocked_by,
    )


@router.get("/me/blocked-users", response_model=list[UserSummary])
async def list_blocked_users(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[UserSummary]:
    blocked_ids = await account_blocks.list_blocked_users(session, user_id=current_user.id)
    return await _load_users(session, blocked_ids)


@router.post("/me/blocked-users", response_model=MutationResponse)
async def block_user(
    payload: BlockRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await account_blocks.block_user(
        session, user_id=current_user.id, peer_email=payload.email
    )
    return to_response(result)


@router.delete("/me/blocked-users/{email}", response_model=MutationResponse)
async def unblock_user(
    email: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await account_blocks.unblock_user(
        session, user_id=current_user.id, peer_email=email
    )
    return to_response(result)


@router.get("/me/posts", response_model=list[PostResponse])
async def list_my_posts(
    response: Response,
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PostResponse]:
    page = await feed.list_my_posts(session, user_id=current_user.id, limit=limit, offset=offset)
    if limit is not None:
        set_next_offset_header(response, offset=offset, limit=limit, has_more=page.has_more)
    return [PostResponse.from_feed_entry(entry) for entry in page.entries]


@router.get("/users/{user_id}/posts", response_model=list[PostResponse])
async def list_user_posts(
    user_id: str,
    response: Response,
    limit: Annotated[int | None, Query(ge=1, le=MAX_PAGE_SIZE)] = None,
    offset: Annotated[int, Query(ge=0)] = 0,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PostResponse]:
    result, page = await feed.list_user_posts(
        session,
        viewer_id=current_user.id,
        owner_id=user_id,
        limit=limit,
        offset=offset,
    )
    to_response(result)
    if limit is not None:
        set_next_offset_header(response, offset=offset, limit=limit, has_more=page.has_more)
    return [PostResponse.from_feed_entry(entry) for entry in page.entries]
