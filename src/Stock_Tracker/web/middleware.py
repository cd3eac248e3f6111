"""Exception-to-HTTP mapping and per-request access logging.

Upstream failures surface from ``Stock_Tracker.utils.exceptions``. Each is
answered with ``{"detail": <message>}`` and the status from
``ERROR_STATUS``; upstream errors also carry the failing ``source``.
"""

import logging
import time

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from Stock_Tracker.utils.exceptions import (
    DataFetchError,
    DataSourceUnavailableError,
    RateLimitExceededError,
    UnknownSymbolError,
)

logger = logging.getLogger(__name__)

# Most specific first; DataFetchError is the catch-all for upstream errors
ERROR_STATUS: tuple[tuple[type[Exception], int], ...] = (
    (UnknownSymbolError, 404),
    (RateLimitExceededError, 429),
    (DataSourceUnavailableError, 503),
    (DataFetchError, 502),
)

_SERVER_ERROR: int = 500


def status_for(exc: Exception) -> int:
    """HTTP status for a domain exception, 500 if it is not mapped."""
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return _SERVER_ERROR


async def _domain_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status = status_for(exc)
    content: dict[str, str] = {"detail": str(exc)}
    if isinstance(exc, DataFetchError):
        content["source"] = exc.source

    log = logger.error if status >= _SERVER_ERROR else logger.warning
    log("%s %s failed with %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=status, content=content)


def register_exception_handlers(app: FastAPI) -> None:
    """Install the domain error handler for every mapped exception type."""
    for exc_type, _ in ERROR_STATUS:
        app.add_exception_handler(exc_type, _domain_error_handler)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status code and duration of every request at INFO."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000

        logger.info(
            "%s %s -> %d (%.1fms)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
        )
        return response
