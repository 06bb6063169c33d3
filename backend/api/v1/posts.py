"""Post creation plus per-user visibility endpoints (hide, save, archive)."""

from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from api.deps import get_current_user, get_db
from models import User
from services import archive as archive_service
from services import content_store, visibility
from .post_views import ImageDescriptor, PostResponse
from .results import MutationResponse, to_response

router = APIRouter(prefix="/posts", tags=["posts"])
MAX_POST_TITLE_LENGTH = 200


class PostCreateRequest(BaseModel):
    title: str = Field(min_length=1, max_length=MAX_POST_TITLE_LENGTH)
    description: str | None = None
    allow_comments: bool = True
    images: list[ImageDescriptor] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)


class PostUpdateRequest(BaseModel):
    title: str | None = Field(default=None, min_length=1, max_length=MAX_POST_TITLE_LENGTH)
    description: str | None = None
    allow_comments: bool | None = None
    images: list[ImageDescriptor] | None = None
    tags: list[str] | None = None


class SavedPostStatusResponse(BaseModel):
    is_saved: bool


class ArchiveEntryResponse(BaseModel):
    post_id: str
    archived_at: datetime


class ArchiveListResponse(BaseModel):
    entries: list[ArchiveEntryResponse]
    expired_post_ids: list[str] = []
    warnings: list[str] = []


@router.post("", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(
    payload: PostCreateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    result, post = await content_store.create_post(
        session,
        owner_id=current_user.id,
        title=payload.title.strip(),
        description=payload.description,
        allow_comments=payload.allow_comments,
        images=[image.model_dump() for image in payload.images],
        tags=payload.tags,
    )
    to_response(result)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Post was not created",
        )
    return PostResponse.from_post(post)


@router.get("/saved", response_model=list[PostResponse])
async def list_saved_posts(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> list[PostResponse]:
    posts = await visibility.list_saved_posts(session, user_id=current_user.id)
    return [PostResponse.from_post(post) for post in posts]


@router.get("/archive", response_model=ArchiveListResponse)
async def list_archive(
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> ArchiveListResponse:
    listing = await archive_service.list_archive(session, user_id=current_user.id)
    return ArchiveListResponse(
        entries=[
            ArchiveEntryResponse(post_id=entry.post_id, archived_at=entry.archived_at)
            for entry in listing.entries
        ],
        expired_post_ids=listing.expired_post_ids,
        warnings=listing.warnings,
    )


@router.patch("/{post_id}", response_model=PostResponse)
async def update_post(
    post_id: str,
    payload: PostUpdateRequest,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    result, post = await content_store.update_post(
        session,
        owner_id=current_user.id,
        post_id=post_id,
        title=payload.title.strip() if payload.title is not None else None,
        description=payload.description,
        allow_comments=payload.allow_comments,
        images=(
            [image.model_dump() for image in payload.images]
            if payload.images is not None
            else None
        ),
        tags=payload.tags,
    )
    to_response(result)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Post was not updated",
        )
    return PostResponse.from_post(post)


@router.delete("/{post_id}", response_model=MutationResponse)
async def delete_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await content_store.delete_post(session, owner_id=current_user.id, post_id=post_id)
    return to_response(result)


@router.post("/{post_id}/hide", response_model=MutationResponse)
async def hide_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await visibility.hide_post(session, user_id=current_user.id, post_id=post_id)
    return to_response(result)


@router.delete("/{post_id}/hide", response_model=MutationResponse)
async def unhide_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await visibility.unhide_post(session, user_id=current_user.id, post_id=post_id)
    return to_response(result)


@router.get("/{post_id}/saved", response_model=SavedPostStatusResponse)
async def get_saved_post_status(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> SavedPostStatusResponse:
    return SavedPostStatusResponse(
        is_saved=await visibility.is_post_saved(
            session, user_id=current_user.id, post_id=post_id
        )
    )


@router.post("/{post_id}/saved", response_model=MutationResponse)
async def save_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await visibility.save_post(session, user_id=current_user.id, post_id=post_id)
    return to_response(result)


@router.delete("/{post_id}/saved", response_model=MutationResponse)
async def unsave_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await visibility.unsave_post(session, user_id=current_user.id, post_id=post_id)
    return to_response(result)


@router.post("/{post_id}/archive", response_model=MutationResponse)
async def archive_post(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await archive_service.archive_post(
        session, user_id=current_user.id, post_id=post_id
    )
    return to_response(result)


@router.delete("/{post_id}/archive", response_model=MutationResponse)
async def remove_from_archive(
    post_id: str,
    session: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> MutationResponse:
    result = await archive_service.remove_from_archive(
        session, user_id=current_user.id, post_id=post_id
    )
    return to_response(result)
