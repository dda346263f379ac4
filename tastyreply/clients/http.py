"""Unified async HTTP client with retry, rate limiting, and circuit breaker.

Provides BaseHTTPClient with built-in reliability patterns. Failures surface
as UpstreamFailure.
"""

from __future__ import annotations

import asyncio
import json
import random
import time
from collections.abc import Mapping
from typing import Any
from urllib.parse import urlsplit

import aiohttp

from tastyreply.clients.circuit_breaker import CircuitBreaker
from tastyreply.clients.ratelimit import AsyncTokenBucket
from tastyreply.core.errors import UpstreamFailure
from tastyreply.core.logging import get_logger
from tastyreply.core.metrics import external_api_duration_seconds, external_api_requests_total

log = get_logger("tastyreply.http")

DEFAULT_TIMEOUT = 30
RETRY_STATUS = {429, 500, 502, 503, 504}


class BaseHTTPClient:
    """Base HTTP client with retry, rate limiting, and circuit breaker."""

    def __init__(
        self,
        base_url: str,
        *,
        service: str,
        default_headers: Mapping[str, str] | None = None,
        timeout_sec: int = DEFAULT_TIMEOUT,
        rate_limit_per_min: int | None = None,
        rate_capacity: int | None = None,
        cb_fail_threshold: int = 5,
        cb_reset_timeout: float = 30.0,
        max_retries: int = 3,
        backoff_base: float = 0.75,
        backoff_max: float = 8.0,
    ) -> None:
        """Initialize HTTP client.

        Args:
            base_url: Base URL for relative request paths
            service: Metrics label (e.g. "google")
            default_headers: Headers to include in all requests
            timeout_sec: Request timeout in seconds
            rate_limit_per_min: Max requests per minute (None to disable)
            rate_capacity: Token bucket capacity (defaults to rate_limit_per_min)
            cb_fail_threshold: Failures before circuit breaker opens
            cb_reset_timeout: Seconds before circuit breaker tries half-open
            max_retries: Maximum attempts per request
            backoff_base: Base delay for exponential backoff
            backoff_max: Maximum backoff delay

        """
        self.base_url = base_url.rstrip("/")
        self.service = service
        self.default_headers = dict(default_headers or {})
        self.timeout_sec = timeout_sec
        self.max_retries = max_retries
        self.backoff_base = backoff_base
        self.backoff_max = backoff_max

        self._rate: AsyncTokenBucket | None = None
        if rate_limit_per_min:
            cap = rate_capacity or rate_limit_per_min
            self._rate = AsyncTokenBucket(rate_per_sec=rate_limit_per_min / 60.0, capacity=cap)

        self._cb = CircuitBreaker(service, cb_fail_threshold, cb_reset_timeout)
        self._session: aiohttp.ClientSession | None = None

    async def _ensure_session(self) -> aiohttp.ClientSession:
        """Get or create aiohttp session."""
        if not self._session or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout_sec)
            self._session = aiohttp.ClientSession(timeout=timeout)
        return self._session

    async def close(self) -> None:
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()

    def _backoff(self, attempt: int) -> float:
        delay = min(self.backoff_base * (2 ** (attempt - 1)), self.backoff_max)
        return delay * random.uniform(0.7, 1.3)

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self.base_url}{path}"

    async def request(
        self,
        method: str,
        path: str,
        *,
        headers: Mapping[str, str] | None = None,
        params: Mapping[str, Any] | None = None,
        json_body: Any = None,
        data: Any = None,
    ) -> tuple[int, str]:
        """Make HTTP request with retry, rate limiting, and circuit breaker.

        Args:
            method: HTTP method (GET, POST, etc.)
            path: URL path relative to base_url, or an absolute URL
            headers: Additional headers
            params: Query parameters
            json_body: JSON body for request
            data: Form data for request

        Returns:
            (status, body text) of the final attempt

        Raises:
            UpstreamFailure: If circuit breaker is open or all attempts fail

        """
        url = self._url(path)
        endpoint = urlsplit(url).path

        if not self._cb.allow():
            raise UpstreamFailure(f"{self.service} temporarily unavailable")

        hdrs = dict(self.default_headers)
        if headers:
            hdrs.update(headers)

        if self._rate:
            await self._rate.acquire(1)

        session = await self._ensure_session()
        attempt = 0

        while True:
            attempt += 1
            t0 = time.perf_counter()

            try:
                async with session.request(
                    method=method.upper(),
                    url=url,
                    headers=hdrs,
                    params=params,
                    json=json_body,
                    data=data,
                ) as resp:
                    status = resp.status
                    body = await resp.text()
                elapsed = time.perf_counter() - t0

                log.info(
                    "http_response",
                    extra={
                        "method": method,
                        "url": url,
                        "status": status,
                        "elapsed_ms": int(elapsed * 1000),
                        "attempt": attempt,
                    },
                )
                external_api_requests_total.labels(
                    service=self.service, endpoint=endpoint, status=str(status)
                ).inc()
                external_api_duration_seconds.labels(
                    service=self.service, endpoint=endpoint
                ).observe(elapsed)

                if status in RETRY_STATUS and attempt < self.max_retries:
                    await asyncio.sleep(self._backoff(attempt))
                    continue

                if 200 <= status < 300:
                    self._cb.on_success()
                elif status >= 500 or status == 429:
                    self._cb.on_failure()
                return status, body

            except (asyncio.TimeoutError, aiohttp.ClientError) as e:
                log.warning(
                    "http_exception",
                    extra={"method": method, "url": url, "attempt": attempt, "error": str(e)},
                )
                external_api_requests_total.labels(
                    service=self.service, endpoint=endpoint, status="exception"
                ).inc()
                self._cb.on_failure()

                if attempt >= self.max_retries:
                    raise UpstreamFailure(f"{self.service} request failed") from e

                await asyncio.sleep(self._backoff(attempt))

    async def json(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        """Make HTTP request and parse a JSON object response.

        Raises:
            UpstreamFailure: On non-2xx status or an undecodable body

        """
        status, txt = await self.request(method, path, **kwargs)
        if not 200 <= status < 300:
            log.error(
                "http_error_status",
                extra={"url": self._url(path), "status": status, "text_sample": txt[:256]},
            )
            raise UpstreamFailure(f"{self.service} returned HTTP {status}")
        try:
            return json.loads(txt) if txt else {}
        except json.JSONDecodeError as e:
            log.error(
                "json_decode_error",
                extra={"url": self._url(path), "text_sample": txt[:256]},
            )
            raise UpstreamFailure(f"{self.service} returned invalid JSON") from e


__all__ = ["BaseHTTPClient", "DEFAULT_TIMEOUT", "RETRY_STATUS"]
