"""Circuit breaker for outbound platform calls."""

from __future__ import annotations

import time

from tastyreply.core.logging import get_logger

log = get_logger("tastyreply.http")


class CircuitBreaker:
    """Open after N consecutive failures, half-open after ``reset_timeout``."""

    def __init__(self, name: str, fail_threshold: int = 5, reset_timeout: float = 30.0):
        self.name = name
        self.fail_threshold = fail_threshold
        self.reset_timeout = reset_timeout
        self.fail_count = 0
        self.state = "closed"  # closed|open|half-open
        self.opened_at = 0.0

    def on_success(self) -> None:
        if self.state != "closed":
            log.info("circuit_closed", extra={"breaker": self.name})
        self.fail_count = 0
        self.state = "closed"

    def on_failure(self) -> None:
        self.fail_count += 1
        # A failed half-open probe re-opens immediately
        if self.state == "half-open" or (
            self.fail_count >= self.fail_threshold and self.state != "open"
        ):
            self.state = "open"
            self.opened_at = time.monotonic()
            log.warning(
                "circuit_opened", extra={"breaker": self.name, "failures": self.fail_count}
            )

    def allow(self) -> bool:
        """Return True if a request may be attempted."""
        if self.state == "open":
            if time.monotonic() - self.opened_at >= self.reset_timeout:
                self.state = "half-open"
                return True
            return False
        return True


__all__ = ["CircuitBreaker"]
