"""Request logging and correlation id middleware.

Each request runs inside a correlation scope taken from the
X-Correlation-ID header (or generated), so the audit events it publishes
and the log lines it writes share one id. The id is echoed on the
response. Rejected requests are logged with the problem kind returned to
the caller.
"""

import time
from typing import Awaitable, Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from src.infrastructure.observability.correlation import correlation_scope

CORRELATION_HEADER = "X-Correlation-ID"

log = structlog.get_logger(component="http")


class LoggingMiddleware(BaseHTTPMiddleware):
    """Binds the correlation id and logs request start and completion."""

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        with correlation_scope(request.headers.get(CORRELATION_HEADER)) as correlation_id:
            request_log = log.bind(method=request.method, path=request.url.path)
            request_log.debug("request_started")
            started = time.perf_counter()
            try:
                response = await call_next(request)
            except Exception as exc:
                request_log.exception(
                    "request_failed",
                    duration_ms=_elapsed_ms(started),
                    error_type=type(exc).__name__,
                )
                raise

            level = "warning" if response.status_code >= 400 else "info"
            getattr(request_log, level)(
                "request_completed",
                status_code=response.status_code,
                duration_ms=_elapsed_ms(started),
            )
            response.headers[CORRELATION_HEADER] = correlation_id
            return response


def _elapsed_ms(started: float) -> float:
    return round((time.perf_counter() - started) * 1000, 2)
