"""Tests for the analytics endpoint."""

from __future__ import annotations


def test_analytics_empty(client, auth_headers):
    response = client.get("/api/analytics", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["totalReviews"] == 0
    assert data["responseRate"] == 0
    assert data["averageRating"] == 0


def test_analytics_counts_only_own_reviews(client, auth_headers, make_token, review_payload):
    other = {"Authorization": f"Bearer {make_token('user-b')}"}
    client.post("/api/reviews", json=review_payload, headers=auth_headers)
    low = {**review_payload, "platformReviewId": "g-2", "rating": 2, "text": "Cold and bland"}
    created = client.post("/api/reviews", json=low, headers=auth_headers).json()["data"]
    client.post("/api/reviews", json={**review_payload, "platform": "yelp"}, headers=other)
    client.post(f"/api/reviews/{created['id']}/reply", json={"reply": "Sorry"}, headers=auth_headers)

    data = client.get("/api/analytics", headers=auth_headers).json()["data"]

    assert data["totalReviews"] == 2
    assert data["repliedReviews"] == 1
    assert data["responseRate"] == 50.0
    assert data["averageRating"] == 3.5
    assert data["platformBreakdown"] == {"google": 2}
    assert data["ratingDistribution"]["5"] == 1
    assert data["ratingDistribution"]["2"] == 1
    assert data["sentimentBreakdown"]["positive"] == 1
    assert data["sentimentBreakdown"]["negative"] == 1
