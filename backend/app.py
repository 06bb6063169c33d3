"""FastAPI application factory."""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.v1 import api_router
from core import settings
from db.errors import is_unique_violation

logger = logging.getLogger(__name__)


def configure_logging() -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


async def integrity_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Report unique-constraint races as conflicts; anything else propagates."""
    if not isinstance(exc, IntegrityError) or not is_unique_violation(exc):
        raise exc
    logger.warning(
        "Unique constraint conflict",
        extra={"path": request.url.path, "method": request.method},
    )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content={"detail": {"detail": "Resource already exists", "outcome": "already_exists"}},
    )


def create_app() -> FastAPI:
    configure_logging()
    application = FastAPI(title=settings.project_name)
    application.add_exception_handler(IntegrityError, integrity_error_handler)
    application.include_router(api_router, prefix=settings.api_v1_prefix)
    return application


app = create_app()
