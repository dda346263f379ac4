"""FastAPI middleware."""

from __future__ import annotations

from tastyreply.web.middleware.prometheus import PrometheusMiddleware
from tastyreply.web.middleware.rate_limit import RateLimitMiddleware
from tastyreply.web.middleware.request_id import RequestIdMiddleware

__all__ = ["PrometheusMiddleware", "RateLimitMiddleware", "RequestIdMiddleware"]
