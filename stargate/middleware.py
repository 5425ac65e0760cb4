# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
HTTP Middleware — request ID propagation, request logging and Prometheus metrics.
"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from stargate.core.logging import get_logger
from stargate.metrics import REQUEST_COUNT, REQUEST_LATENCY, HTTP_ERRORS

logger = get_logger("stargate.http")

KNOWN_SEGMENTS: set[str] = {
    "api", "v1", "people", "duties", "health", "ready", "live", "metrics",
}

SKIP_PATHS: tuple[str, ...] = (
    "/health", "/health/ready", "/health/live", "/metrics",
    "/openapi.json", "/docs", "/redoc",
)


def normalize_path(path: str) -> str:
    """Collapse path parameters (person names) so metric labels stay bounded."""
    parts = path.strip("/").split("/")
    if parts == [""]:
        return path
    return "/" + "/".join(p if p in KNOWN_SEGMENTS else "{param}" for p in parts)


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Propagate or generate X-Request-ID for distributed tracing."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
        request.state.request_id = request_id
        response = await call_next(request)
        response.headers["X-Request-ID"] = request_id
        return response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One structured log line per request (ops endpoints excluded)."""

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        response = await call_next(request)
        if request.url.path not in SKIP_PATHS:
            logger.info(
                "%s %s -> %d", request.method, request.url.path, response.status_code,
                extra={
                    "request_id": getattr(request.state, "request_id", None),
                    "method": request.method,
                    "path": request.url.path,
                    "status_code": response.status_code,
                    "duration_ms": round((time.time() - start) * 1000, 2),
                },
            )
        return response


class MetricsMiddleware(BaseHTTPMiddleware):
    """
    Track request count, latency, and error rate via Prometheus.
    An exception escaping the app is counted as a 500 before it propagates
    to the server error handler, so crashes show up in the error rate.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.time()
        try:
            response = await call_next(request)
        except Exception:
            _observe(request, 500, time.time() - start)
            raise
        _observe(request, response.status_code, time.time() - start)
        return response


def _observe(request: Request, status_code: int, duration: float) -> None:
    path = request.url.path
    if path in SKIP_PATHS:
        return
    endpoint = normalize_path(path)
    status = str(status_code)
    REQUEST_COUNT.labels(method=request.method, endpoint=endpoint, status=status).inc()
    REQUEST_LATENCY.labels(method=request.method, endpoint=endpoint).observe(duration)
    if status_code >= 400:
        HTTP_ERRORS.labels(method=request.method, endpoint=endpoint, status=status).inc()
