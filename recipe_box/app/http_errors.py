# recipe_box/app/http_errors.py
"""
Maps domain and upstream errors to HTTP responses.
Routers let these propagate; the handlers below give them a status code.
"""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from recipe_box.app.domain.errors import (
    AuthError,
    NotFoundError,
    RecipeBoxError,
    StorageError,
    StoreError,
    UnauthorizedError,
    ValidationError,
    WeakPasswordError,
)
from recipe_box.services.errors import ServiceError, UpstreamError

logger = logging.getLogger(__name__)


def status_for(exc: Exception) -> int:
    if isinstance(exc, (ValidationError, WeakPasswordError)):
        return 400
    if isinstance(exc, AuthError):
        return 401
    if isinstance(exc, UnauthorizedError):
        return 403
    if isinstance(exc, NotFoundError):
        return 404
    if isinstance(exc, UpstreamError):
        return 502
    if isinstance(exc, (StoreError, StorageError)):
        return 503
    return 500


def detail_for(exc: Exception) -> str:
    if isinstance(exc, AuthError):
        return exc.user_message
    if isinstance(exc, ValidationError):
        return str(exc)
    if isinstance(exc, (StoreError, StorageError, ServiceError)):
        # Backend details stay in the logs
        return "Service temporarily unavailable"
    return str(exc)


async def _handle(request: Request, exc: Exception) -> JSONResponse:
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("http.error path=%s status=%d error=%s", request.url.path, status_code, exc)
    else:
        logger.info("http.rejected path=%s status=%d error=%s", request.url.path, status_code, exc)
    return JSONResponse(status_code=status_code, content={"detail": detail_for(exc)})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RecipeBoxError, _handle)
    app.add_exception_handler(ServiceError, _handle)
