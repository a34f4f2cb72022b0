"""Request/response logging middleware with timing."""

import time
from typing import Callable

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from fraud_detection.core.metrics import record_http_request

logger = structlog.get_logger(__name__)

# Paths that are polled too often to be worth logging
SILENT_PATHS = frozenset({"/metrics", "/v1/health", "/v1/health/ready"})


def _endpoint_label(request: Request) -> str:
    """Route template for metrics labels, so IDs don't explode cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or request.url.path


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs request start, completion and duration, and records HTTP metrics."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        method = request.method
        path = request.url.path
        silent = path in SILENT_PATHS

        log = logger.bind(method=method, path=path)
        if not silent:
            log.info("request_started")

        try:
            response = await call_next(request)
        except Exception as e:
            duration = time.perf_counter() - start_time
            log.error(
                "request_failed",
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=round(duration * 1000, 2),
            )
            record_http_request(method, _endpoint_label(request), 500, duration)
            raise

        duration = time.perf_counter() - start_time
        if not silent:
            log.info(
                "request_completed",
                status_code=response.status_code,
                duration_ms=round(duration * 1000, 2),
            )
        record_http_request(method, _endpoint_label(request), response.status_code, duration)
        return response
