"""Access logging middleware for FastAPI.

Logs every request with method, path, status code, duration and client
address. Health probes are skipped.
"""

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from addonmirror.common.logger import get_logger

logger = get_logger("access")

# Paths that should not be logged
EXCLUDED_PATHS = {
    "/health",
    "/health/ready",
    "/favicon.ico",
}


def get_client_ip(request: Request) -> str:
    """Extract client IP from request, handling proxies."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        # Take the first IP (original client)
        return forwarded.split(",")[0].strip()

    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


class AccessLogMiddleware(BaseHTTPMiddleware):
    """Middleware that writes one log line per handled request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXCLUDED_PATHS:
            return await call_next(request)

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        logger.info(
            f"{get_client_ip(request)} {request.method} {request.url.path} "
            f"{response.status_code} {duration_ms:.1f}ms"
        )
        return response
