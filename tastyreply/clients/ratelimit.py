"""Token bucket rate limiter.

Shared by outbound clients (waiting ``acquire``) and the inbound global
request ceiling (non-blocking ``try_acquire``).
"""

from __future__ import annotations

import asyncio
import time


class AsyncTokenBucket:
    """Token bucket with time-based refill."""

    def __init__(self, rate_per_sec: float, capacity: int):
        """Initialize token bucket.

        Args:
            rate_per_sec: Token refill rate per second
            capacity: Maximum number of tokens

        """
        if rate_per_sec <= 0 or capacity <= 0:
            raise ValueError("rate_per_sec and capacity must be positive")
        self.rate = rate_per_sec
        self.capacity = capacity
        self.tokens = float(capacity)
        self.updated = time.monotonic()
        self._lock = asyncio.Lock()

    def _refill(self) -> None:
        now = time.monotonic()
        self.tokens = min(self.capacity, self.tokens + (now - self.updated) * self.rate)
        self.updated = now

    def try_acquire(self, tokens: int = 1) -> bool:
        """Take tokens if available without waiting.

        Returns:
            True if tokens were taken, False if the bucket is empty

        """
        self._refill()
        if self.tokens >= tokens:
            self.tokens -= tokens
            return True
        return False

    async def acquire(self, tokens: int = 1) -> None:
        """Acquire tokens from bucket, waiting if necessary."""
        async with self._lock:
            self._refill()
            if self.tokens < tokens:
                wait_sec = (tokens - self.tokens) / self.rate
                await asyncio.sleep(wait_sec)
                self._refill()
            self.tokens = max(0.0, self.tokens - tokens)


__all__ = ["AsyncTokenBucket"]
