"""Per-request access logging middleware."""

from __future__ import annotations

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger(__name__)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log method, path, status and duration for every request.

    Headers and bodies are never logged, so bearer tokens and passwords stay
    out of the access log.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            _log_request(request, status_code=500, started=started)
            raise
        _log_request(request, status_code=response.status_code, started=started)
        return response


def _log_request(request: Request, *, status_code: int, started: float) -> None:
    logger.info(
        "http_request method=%s path=%s status=%s duration_ms=%.1f",
        request.method,
        request.url.path,
        status_code,
        (time.perf_counter() - started) * 1000,
    )
