"""Global inbound request ceiling."""

from __future__ import annotations

from typing import Callable

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from tastyreply.clients.ratelimit import AsyncTokenBucket
from tastyreply.core.logging import get_logger
from tastyreply.core.metrics import http_requests_rate_limited_total

log = get_logger("tastyreply.web")

# Probes and scrapes are never throttled
EXEMPT_PATHS = frozenset({"/health", "/healthz", "/metrics"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests with 429 once the shared token bucket is empty.

    One bucket serves every client: this is a process-wide ceiling, not a
    per-user quota.
    """

    def __init__(self, app, *, per_minute: int, capacity: int):
        super().__init__(app)
        self.bucket = AsyncTokenBucket(rate_per_sec=per_minute / 60.0, capacity=capacity)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path in EXEMPT_PATHS or self.bucket.try_acquire():
            return await call_next(request)

        http_requests_rate_limited_total.inc()
        log.warning("rate_limited", extra={"path": request.url.path, "method": request.method})
        return JSONResponse(
            status_code=429,
            content={"success": False, "error": "Too many requests, please try again later."},
            headers={"Retry-After": "60"},
        )
