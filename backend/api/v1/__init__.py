"""Version 1 API routers."""

from fastapi import APIRouter

from . import engagement, feed, posts, users

api_router = APIRouter()
api_router.include_router(users.router)
api_router.include_router(posts.router)
api_router.include_router(engagement.router)
api_router.include_router(feed.router)

__all__ = ["api_router"]
