"""Request logging with a per-request trace id."""

from __future__ import annotations

import time
import uuid

import structlog
from fastapi import FastAPI, Request

__all__ = ["install_request_logging", "TRACE_HEADER"]

logger = structlog.get_logger(__name__)

TRACE_HEADER = "X-Trace-Id"


def install_request_logging(app: FastAPI) -> None:
    """Bind ``trace_id`` for the duration of each request and log its outcome."""

    @app.middleware("http")
    async def _log_requests(request: Request, call_next):
        trace_id = request.headers.get(TRACE_HEADER) or uuid.uuid4().hex
        request.state.trace_id = trace_id
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(trace_id=trace_id)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "request_failed", method=request.method, path=request.url.path
            )
            raise
        finally:
            structlog.contextvars.unbind_contextvars("trace_id")

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        logger.info(
            "request",
            method=request.method,
            path=request.url.path,
            status=response.status_code,
            duration_ms=duration_ms,
            trace_id=trace_id,
        )
        response.headers[TRACE_HEADER] = trace_id
        return response
