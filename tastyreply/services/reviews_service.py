"""Review ingestion, Google sync and reply posting."""

from __future__ import annotations

import logging
from typing import Any

from tastyreply.clients.google import GoogleReviewsClient, normalize_google_review
from tastyreply.core.errors import UpstreamFailure, ValidationError
from tastyreply.core.metrics import replies_attached_total, reviews_ingested_total
from tastyreply.domain.reviews.classifier import classify_sentiment, extract_keywords
from tastyreply.domain.reviews.models import Platform, ReviewRecord
from tastyreply.stores.base import ReviewStore

log = logging.getLogger(__name__)


def _validate(raw: dict[str, Any]) -> dict[str, Any]:
    try:
        platform = Platform(raw.get("platform"))
    except ValueError as e:
        allowed = ", ".join(p.value for p in Platform)
        raise ValidationError(f"platform must be one of: {allowed}") from e

    external_id = raw.get("platform_review_id")
    if not external_id or not str(external_id).strip():
        raise ValidationError("platform_review_id is required")

    rating = raw.get("rating")
    if isinstance(rating, bool) or not isinstance(rating, int) or not 1 <= rating <= 5:
        raise ValidationError("rating must be an integer between 1 and 5")

    return {**raw, "platform": platform.value, "platform_review_id": str(external_id)}


def ingest_review(store: ReviewStore, user_id: str, raw: dict[str, Any]) -> tuple[ReviewRecord, bool]:
    """Validate, classify and upsert one review for ``user_id``.

    Args:
        store: Review store
        user_id: Owning user
        raw: Ingestion fields (platform, platform_review_id, rating, text,
            customer_name, review_date, business_id, existing_reply)

    Returns:
        (stored review, True if it was inserted)

    Raises:
        ValidationError: On unknown platform, missing external id or bad rating

    """
    if not user_id:
        raise ValidationError("user_id is required")
    record = _validate(raw)

    text = record.get("text") or ""
    record["user_id"] = user_id
    record["sentiment"] = classify_sentiment(rating=record["rating"], text=text).value
    record["keywords"] = extract_keywords(text)

    review, created = store.upsert_review(record)
    reviews_ingested_total.labels(
        platform=record["platform"], outcome="inserted" if created else "updated"
    ).inc()
    return review, created


async def sync_google_reviews(
    store: ReviewStore, client: GoogleReviewsClient, user_id: str
) -> dict[str, int]:
    """Pull every review from the user's Business Profile locations.

    Reviews Google sends without a usable rating or id are skipped.

    Returns:
        Dict with synced, inserted, updated and skipped counts

    """
    counts = {"synced": 0, "inserted": 0, "updated": 0, "skipped": 0}

    for account in await client.get_accounts():
        for location in await client.get_locations(account["name"]):
            for raw in await client.get_reviews(account["name"], location["name"]):
                try:
                    _, created = ingest_review(store, user_id, normalize_google_review(raw))
                except ValidationError as e:
                    counts["skipped"] += 1
                    log.warning(
                        "google_review_skipped",
                        extra={"review": raw.get("name"), "reason": e.message},
                    )
                    continue
                counts["synced"] += 1
                counts["inserted" if created else "updated"] += 1

    log.info("google_sync_completed", extra={"user_id": user_id, **counts})
    return counts


def _is_google_resource(name: str) -> bool:
    # Business Profile reviews are addressed as accounts/*/locations/*/reviews/*
    return name.startswith("accounts/") and "/reviews/" in name


async def post_reply(
    store: ReviewStore,
    *,
    review_id: str,
    user_id: str,
    text: str,
    author: str | None = None,
    google_client: GoogleReviewsClient | None = None,
) -> ReviewRecord:
    """Attach a reply to a review, publishing it to Google first when possible.

    The local record is only written after the platform accepted the reply, so
    a failed push leaves the review unreplied.

    Raises:
        ValidationError: Empty reply text
        NotFound: No review with that id
        Forbidden: Review owned by another user
        UpstreamFailure: Google rejected the reply

    """
    if not text or not text.strip():
        raise ValidationError("Reply text is required")

    review = store.get_review(review_id, user_id)

    if (
        google_client is not None
        and review["platform"] == Platform.GOOGLE.value
        and _is_google_resource(review["platform_review_id"])
    ):
        try:
            await google_client.reply_to_review(review["platform_review_id"], text)
        except UpstreamFailure as e:
            log.error(
                "google_reply_failed",
                extra={"review_id": review_id, "error": e.message},
            )
            raise

    updated = store.attach_reply(review_id, user_id, text, author)
    store.mark_generation_posted(review_id, user_id)
    replies_attached_total.labels(platform=review["platform"]).inc()
    log.info("reply_attached", extra={"review_id": review_id, "platform": review["platform"]})
    return updated


__all__ = ["ingest_review", "sync_google_reviews", "post_reply"]
