"""Exception to HTTP translation for the PMA API.

Services raise plain exceptions; this module maps them onto status codes and
the ``{success: false, ...}`` error body:

- ``ValueError`` / request validation errors -> 400
- ``PermissionError`` -> 403
- ``NoResultFound`` -> 404
- ``IntegrityError`` -> 409
- anything else -> 500 (details only in development)
"""

from __future__ import annotations

import datetime as dt
import logging
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, NoResultFound
from starlette.exceptions import HTTPException as StarletteHTTPException

from .middleware import TRACE_HEADER

__all__ = ["install_exception_handlers", "error_body", "GENERIC_ERROR_MESSAGE"]

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "An unexpected error occurred. Please try again later."


def error_body(
    request: Request, message: str, error: str | None = None
) -> dict[str, Any]:
    return {
        "success": False,
        "message": message,
        "error": error,
        "timestamp": dt.datetime.now(dt.timezone.utc).isoformat(),
        "path": request.url.path,
        "traceId": getattr(request.state, "trace_id", None),
    }


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()) if part != "body")
        parts.append(f"{location}: {err.get('msg')}" if location else str(err.get("msg")))
    return "; ".join(parts)


def install_exception_handlers(app: FastAPI, *, development: bool = False) -> None:
    """Register the PMA exception handlers on *app*."""

    @app.exception_handler(StarletteHTTPException)
    async def _handle_http(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(request, str(exc.detail)),
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def _handle_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(request, "Validation failed", _validation_message(exc)),
        )

    @app.exception_handler(ValueError)
    async def _handle_value(request: Request, exc: ValueError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=error_body(request, str(exc) or "Invalid request"),
        )

    @app.exception_handler(PermissionError)
    async def _handle_permission(request: Request, exc: PermissionError):
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content=error_body(request, str(exc) or "Forbidden"),
        )

    @app.exception_handler(NoResultFound)
    async def _handle_not_found(request: Request, exc: NoResultFound):
        message = str(exc.args[0]) if exc.args else "Resource not found"
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content=error_body(request, message or "Resource not found"),
        )

    @app.exception_handler(IntegrityError)
    async def _handle_integrity(request: Request, exc: IntegrityError):
        logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content=error_body(
                request,
                "The request conflicts with existing data",
                str(exc.orig) if development else None,
            ),
        )

    @app.exception_handler(Exception)
    async def _handle_unexpected(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        # runs outside the request logging middleware, so the header is set here
        trace_id = getattr(request.state, "trace_id", None)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_body(request, GENERIC_ERROR_MESSAGE, str(exc) if development else None),
            headers={TRACE_HEADER: trace_id} if trace_id else None,
        )
