"""
Exception handlers - render errors into the response envelope.

Domain exceptions carry their own status code; request validation errors
are flattened into field -> messages; anything else becomes a 500 whose
message is only revealed when DEBUG is on.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from structlog import get_logger

from app.api.serializers import envelope
from app.config import settings
from app.exceptions import AuthenticationError, DirectoryError, ValidationError
from app.models.api import field_errors
from app.observability.metrics import metrics

logger = get_logger(__name__)

INTERNAL_ERROR_MESSAGE = "Internal server error"


def error_response(
    status_code: int,
    message: str,
    errors: dict[str, list[str]] | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=envelope(None, message, success=False, errors=errors),
        headers=headers,
    )


async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
    """Render a domain exception with its own status code."""
    if isinstance(exc, ValidationError):
        logger.info(
            "validation_failed",
            path=request.url.path,
            method=request.method,
            fields=sorted(exc.errors),
        )
        return error_response(exc.status_code, exc.message, errors=exc.errors)

    headers = None
    if isinstance(exc, AuthenticationError):
        headers = {"WWW-Authenticate": "Bearer"}

    logger.info(
        "request_rejected",
        path=request.url.path,
        method=request.method,
        status_code=exc.status_code,
        error_type=type(exc).__name__,
    )
    return error_response(exc.status_code, str(exc), headers=headers)


async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Flatten FastAPI's request validation errors into field -> messages."""
    errors = field_errors(exc.errors())

    logger.warning(
        "request_validation_error",
        path=request.url.path,
        method=request.method,
        fields=sorted(errors),
        body_preview=str(exc.body)[:500] if exc.body else None,
    )
    return error_response(422, "Validation failed", errors=errors)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Routing and framework errors (unknown path, wrong method) in the envelope."""
    headers: dict[str, Any] | None = getattr(exc, "headers", None)
    return error_response(exc.status_code, str(exc.detail), headers=headers)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log with traceback, hide the message unless debugging."""
    metrics.record_error(type(exc).__name__, "unhandled_exception")
    logger.error(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        error=str(exc),
        exc_info=exc,
    )
    message = str(exc) if settings.debug else INTERNAL_ERROR_MESSAGE
    return error_response(500, message)


def register_exception_handlers(app: FastAPI) -> None:
    """Install all envelope-rendering handlers on the application."""
    app.add_exception_handler(DirectoryError, directory_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)


class UnhandledErrorMiddleware(BaseHTTPMiddleware):
    """
    Render unhandled exceptions as the 500 envelope inside the CORS layer.

    A handler registered for `Exception` runs in Starlette's outermost
    middleware, so its response would skip the CORS headers.
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            return await unhandled_exception_handler(request, exc)
