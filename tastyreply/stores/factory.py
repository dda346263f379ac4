"""Review store selection."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from tastyreply.core.config import Settings
from tastyreply.core.logging import get_logger
from tastyreply.db.session import create_db_engine
from tastyreply.domain.reviews.classifier import classify_sentiment, extract_keywords
from tastyreply.stores.base import ReviewStore
from tastyreply.stores.memory import InMemoryReviewStore
from tastyreply.stores.sql import SqlReviewStore

log = get_logger("tastyreply.store")


def _demo(**fields: Any) -> dict[str, Any]:
    fields["sentiment"] = classify_sentiment(rating=fields["rating"], text=fields["text"]).value
    fields["keywords"] = extract_keywords(fields["text"])
    return fields


DEMO_REVIEWS: tuple[dict[str, Any], ...] = (
    _demo(
        platform="google",
        platform_review_id="google_1",
        customer_name="Sarah Johnson",
        rating=5,
        text="Amazing food and excellent service! The pasta was perfectly cooked.",
        review_date=datetime(2024, 7, 20, tzinfo=timezone.utc),
    ),
    _demo(
        platform="google",
        platform_review_id="google_2",
        customer_name="Mike Chen",
        rating=4,
        text="Good food overall, but the wait time was a bit long.",
        review_date=datetime(2024, 7, 19, tzinfo=timezone.utc),
        existing_reply="Thank you for your feedback, Mike!",
    ),
)


def _memory_store(settings: Settings) -> InMemoryReviewStore:
    return InMemoryReviewStore(DEMO_REVIEWS if settings.seed_demo_reviews else ())


def build_review_store(settings: Settings) -> ReviewStore:
    """Build the configured store.

    The SQL backend falls back to the in-memory store when the database
    cannot be reached at startup.
    """
    backend = settings.review_store_backend.lower()
    if backend == "memory":
        return _memory_store(settings)
    if backend != "sql":
        raise ValueError(f"Unknown review store backend: {settings.review_store_backend}")

    try:
        store = SqlReviewStore(create_db_engine(settings.database_url))
        store.create_schema()
    except Exception as e:
        log.warning(
            "review_store_fallback",
            extra={"backend": "memory", "reason": f"{type(e).__name__}: {e}"},
        )
        return _memory_store(settings)

    if not store.ping():
        log.warning("review_store_fallback", extra={"backend": "memory", "reason": "ping failed"})
        return _memory_store(settings)

    log.info("review_store_ready", extra={"backend": "sql"})
    return store


__all__ = ["build_review_store", "DEMO_REVIEWS"]
