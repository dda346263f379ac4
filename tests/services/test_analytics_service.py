"""Tests for dashboard analytics."""

from __future__ import annotations

from tastyreply.services.analytics_service import compute_analytics


def _review(platform: str, rating: int, replied: bool, sentiment: str | None = None, text: str = ""):
    return {
        "platform": platform,
        "rating": rating,
        "replied": replied,
        "sentiment": sentiment,
        "text": text,
    }


def test_empty_analytics():
    data = compute_analytics([])

    assert data["totalReviews"] == 0
    assert data["repliedReviews"] == 0
    assert data["responseRate"] == 0
    assert data["averageRating"] == 0
    assert data["platformBreakdown"] == {}
    assert data["ratingDistribution"] == {"1": 0, "2": 0, "3": 0, "4": 0, "5": 0}
    assert data["sentimentBreakdown"] == {"positive": 0, "neutral": 0, "negative": 0}


def test_analytics_aggregates():
    reviews = [
        _review("google", 5, True, "positive"),
        _review("google", 4, False, "positive"),
        _review("yelp", 2, True, "negative"),
        _review("facebook", 3, False, None, text="Nice but slow"),
    ]

    data = compute_analytics(reviews)

    assert data["totalReviews"] == 4
    assert data["repliedReviews"] == 2
    assert data["responseRate"] == 50.0
    assert data["averageRating"] == 3.5
    assert data["platformBreakdown"] == {"google": 2, "yelp": 1, "facebook": 1}
    assert data["ratingDistribution"] == {"1": 0, "2": 1, "3": 1, "4": 1, "5": 1}
    assert data["sentimentBreakdown"] == {"positive": 2, "neutral": 1, "negative": 1}


def test_rates_round_to_one_decimal():
    reviews = [_review("google", 5, True), _review("google", 4, False), _review("google", 4, False)]

    data = compute_analytics(reviews)

    assert data["responseRate"] == 33.3
    assert data["averageRating"] == 4.3
