"""Prometheus metrics middleware for FastAPI."""

from __future__ import annotations

import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from tastyreply.core.metrics import (
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)

# Path segments followed by a record id
_ID_PARENTS = frozenset({"reviews", "generate-reply", "save-reply", "analyze"})
_HEX = frozenset("0123456789abcdef")


class PrometheusMiddleware(BaseHTTPMiddleware):
    """Middleware to collect Prometheus metrics for HTTP requests."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        method = request.method
        endpoint = normalize_path(request.url.path)

        http_requests_in_progress.labels(method=method, endpoint=endpoint).inc()
        start_time = time.time()
        status = "500"
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            http_request_duration_seconds.labels(method=method, endpoint=endpoint).observe(
                time.time() - start_time
            )
            http_requests_total.labels(method=method, endpoint=endpoint, status=status).inc()
            http_requests_in_progress.labels(method=method, endpoint=endpoint).dec()


def normalize_path(path: str) -> str:
    """Replace record ids with a placeholder to bound label cardinality.

    Examples:
        >>> normalize_path("/api/reviews/42/reply")
        '/api/reviews/{id}/reply'
        >>> normalize_path("/api/ai/save-reply/9f1c2e")
        '/api/ai/save-reply/{id}'
        >>> normalize_path("/api/reviews")
        '/api/reviews'

    """
    parts = path.split("?")[0].split("/")
    normalized = []
    for i, part in enumerate(parts):
        if part and (
            part.isdigit()
            or (len(part) == 32 and set(part) <= _HEX)
            or (i > 1 and parts[i - 1] in _ID_PARENTS)
        ):
            normalized.append("{id}")
        else:
            normalized.append(part)
    return "/".join(normalized)
