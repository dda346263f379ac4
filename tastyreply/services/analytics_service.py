"""Dashboard analytics over a user's reviews."""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from typing import Any

from tastyreply.domain.reviews.classifier import classify_sentiment
from tastyreply.domain.reviews.models import ReviewRecord, Sentiment


def compute_analytics(reviews: Iterable[ReviewRecord]) -> dict[str, Any]:
    """Aggregate review counts, response rate and distributions.

    Rates and averages are rounded to one decimal and are 0 for an empty set.
    Reviews stored without a sentiment are classified on the fly.

    Examples:
        >>> compute_analytics([])["responseRate"]
        0

    """
    reviews = list(reviews)
    total = len(reviews)
    replied = sum(1 for r in reviews if r.get("replied"))

    platforms = Counter(r["platform"] for r in reviews)
    ratings = Counter(r["rating"] for r in reviews)
    sentiments = Counter(
        r.get("sentiment") or classify_sentiment(rating=r["rating"], text=r.get("text")).value
        for r in reviews
    )

    return {
        "totalReviews": total,
        "repliedReviews": replied,
        "responseRate": round(replied / total * 100, 1) if total else 0,
        "averageRating": round(sum(r["rating"] for r in reviews) / total, 1) if total else 0,
        "platformBreakdown": dict(platforms),
        "ratingDistribution": {str(star): ratings.get(star, 0) for star in range(1, 6)},
        "sentimentBreakdown": {s.value: sentiments.get(s.value, 0) for s in Sentiment},
    }


__all__ = ["compute_analytics"]
