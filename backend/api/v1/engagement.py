"""Comment and react endpoints for posts and comments."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import ReactType, TargetKind, TargetRef, User
from services import content_store
from .post_views import CommentResponse, ImageDescriptor, ReactResponse
from .results import MutationResponse, to_response

router = APIRouter(tags=["engagement"])
MAX_COMMENT_LENGTH = 2200


class CommentCreateRequest(BaseModel):
    target_kind: TargetKind = TargetKind.POST
    target_id: str
    content: str = Field(min_length=1, max_length=MAX_COMMENT_LENGTH)
    images: list[ImageDescriptor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class CommentUpdateRequest(BaseModel):
    content: str | None = Field(default=None, min_length=1, max_length=MAX_COMMENT_LENGTH)
    images: list[ImageDescriptor] | None = None
    tags: list[str] | None = None


class ReactCreateRequest(BaseModel):
    target_kind: TargetKind = TargetKind.POST
    target_id: str
    react_type: ReactType = ReactType.LIKE


@router.get("/comments", response_model=list[CommentResponse])
async def list_comments(
    target_id: Annotated[str, Query(min_length=1)],
    target_kind: Annotated[TargetKind, Query()] = TargetKind.POST,
    session: AsyncSession = Depends(get_db),
    _: User = Depends(get_current_user),
) -> list[CommentResponse]:
    result, comments = await content_store.list_comments(
        session, TargetRef(kind=target_kind, id=target_id)
    )
    to_response(result)
    return [CommentResponse.from_comment(comment) for comment in comments]


@router.post(
    "/comments",
    status_code=status.HTTP_201_CREATED,
    response_model=CommentResponse,
)
async def add_comment(
    payload: CommentCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    result, comment = await content_store.add_comment(
        session,
        owner_id=current_user.id,
        target=TargetRef(kind=payload.target_kind, id=payload.target_id),
        content=payload.content.strip(),
        images=[image.model_dump() for image in payload.images],
        tags=payload.tags,
    )
    to_response(result)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Comment was not created",
        )
    return CommentResponse.from_comment(comment)


@router.patch("/comments/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    comment_id: str,
    payload: CommentUpdateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> CommentResponse:
    result, comment = await content_store.edit_comment(
        session,
        owner_id=current_user.id,
        comment_id=comment_id,
        content=payload.content.strip() if payload.content is not None else None,
        images=(
            [image.model_dump() for image in payload.images]
            if payload.images is not None
            else None
        ),
        tags=payload.tags,
    )
    to_response(result)
    if comment is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Comment was not updated",
        )
    return CommentResponse.from_comment(comment)


@router.delete("/comments/{comment_id}", response_model=MutationResponse)
async def delete_comment(
    comment_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await content_store.delete_comment(
        session, owner_id=current_user.id, comment_id=comment_id
    )
    return to_response(result)


@router.post(
    "/reacts",
    status_code=status.HTTP_201_CREATED,
    response_model=ReactResponse,
)
async def add_react(
    payload: ReactCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ReactResponse:
    result, react = await content_store.add_react(
        session,
        owner_id=current_user.id,
        target=TargetRef(kind=payload.target_kind, id=payload.target_id),
        react_type=payload.react_type,
    )
    to_response(result)
    if react is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="React was not created",
        )
    return ReactResponse.from_react(react)


@router.delete("/reacts/{react_id}", response_model=MutationResponse)
async def delete_react(
    react_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await content_store.delete_react(session, owner_id=current_user.id, react_id=react_id)
    return to_response(result)
