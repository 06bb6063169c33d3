"""Shared FastAPI dependencies."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated, Any, cast

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from db.session import AsyncSessionMaker
from models import User
from services.common import eq

ACTING_USER_HEADER = "X-User-Id"


async def get_db() -> AsyncIterator[AsyncSession]:
    async with AsyncSessionMaker() as session:
        yield session


async def get_current_user(
    acting_user_id: Annotated[str | None, Header(alias=ACTING_USER_HEADER)] = None,
    session: AsyncSession = Depends(get_db),
) -> User:
    """Load the acting user resolved upstream by the authentication gateway."""
    if not acting_user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing acting user",
        )
    result = await session.execute(
        select(cast(Any, User)).where(eq(User.id, acting_user_id)).limit(1)
    )
    user = result.scalar_one_or_none()
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unknown acting user",
        )
    return user
