"""Tests for rate limiting."""

import time

import pytest

from tastyreply.clients.ratelimit import AsyncTokenBucket


async def test_token_bucket_rate():
    """Test that token bucket enforces rate limit."""
    bucket = AsyncTokenBucket(rate_per_sec=10, capacity=5)
    t0 = time.monotonic()

    # Use up 5 tokens immediately
    for _ in range(5):
        await bucket.acquire()

    # 6th token should require waiting ~0.1s
    await bucket.acquire()
    elapsed = time.monotonic() - t0

    assert elapsed >= 0.09  # Allow small margin for timing


async def test_token_bucket_burst():
    """Test that bucket allows burst up to capacity."""
    bucket = AsyncTokenBucket(rate_per_sec=10, capacity=20)

    t0 = time.monotonic()
    for _ in range(20):
        await bucket.acquire()

    elapsed = time.monotonic() - t0
    assert elapsed < 0.1


def test_try_acquire_does_not_wait():
    bucket = AsyncTokenBucket(rate_per_sec=0.01, capacity=2)

    assert bucket.try_acquire()
    assert bucket.try_acquire()
    assert not bucket.try_acquire()


def test_try_acquire_refills():
    bucket = AsyncTokenBucket(rate_per_sec=100, capacity=1)
    assert bucket.try_acquire()
    assert not bucket.try_acquire()

    time.sleep(0.02)

    assert bucket.try_acquire()


@pytest.mark.parametrize("rate, capacity", [(0, 1), (1, 0), (-1, 5)])
def test_token_bucket_rejects_bad_config(rate, capacity):
    with pytest.raises(ValueError):
        AsyncTokenBucket(rate_per_sec=rate, capacity=capacity)
