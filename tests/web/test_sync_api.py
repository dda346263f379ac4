"""Tests for the Google sync endpoint."""

from __future__ import annotations

from unittest.mock import AsyncMock, Mock

import pytest

from tastyreply.core.errors import UpstreamFailure
from tastyreply.web.deps import get_google_reviews_client


@pytest.fixture
def google(app):
    fake = Mock()
    fake.get_accounts = AsyncMock(return_value=[{"name": "accounts/1"}])
    fake.get_locations = AsyncMock(return_value=[{"name": "locations/2"}])
    fake.reply_to_review = AsyncMock(return_value={})
    fake.get_reviews = AsyncMock(
        return_value=[
            {
                "name": "accounts/1/locations/2/reviews/a",
                "starRating": "FIVE",
                "reviewer": {"displayName": "Sarah"},
                "comment": "Wonderful pasta",
                "createTime": "2024-07-20T10:00:00.123456789Z",
            },
            {
                "name": "accounts/1/locations/2/reviews/b",
                "starRating": "TWO",
                "comment": "Slow service",
                "reviewReply": {"comment": "Sorry about that"},
            },
            {"name": "accounts/1/locations/2/reviews/c", "starRating": "STAR_RATING_UNSPECIFIED"},
        ]
    )
    app.dependency_overrides[get_google_reviews_client] = lambda: fake
    return fake


def test_sync_requires_google_token(client, auth_headers):
    response = client.post("/api/sync/google", headers=auth_headers)

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Google authentication required"}


def test_sync_google(client, auth_headers, google):
    response = client.post("/api/sync/google", headers=auth_headers)

    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "syncedCount": 2,
        "inserted": 2,
        "updated": 0,
        "skipped": 1,
    }
    google.get_reviews.assert_awaited_once_with("accounts/1", "locations/2")

    reviews = client.get("/api/reviews", headers=auth_headers).json()["data"]
    by_id = {r["platformReviewId"]: r for r in reviews}
    assert by_id["accounts/1/locations/2/reviews/a"]["customerName"] == "Sarah"
    assert by_id["accounts/1/locations/2/reviews/b"]["customerName"] == "Anonymous"
    assert by_id["accounts/1/locations/2/reviews/b"]["replied"] is True


def test_resync_keeps_local_reply(client, auth_headers, google):
    client.post("/api/sync/google", headers=auth_headers)
    review = next(
        r
        for r in client.get("/api/reviews", headers=auth_headers).json()["data"]
        if r["platformReviewId"].endswith("/a")
    )
    reply = client.post(
        f"/api/reviews/{review['id']}/reply", json={"reply": "Grazie"}, headers=auth_headers
    )
    assert reply.status_code == 200
    google.reply_to_review.assert_awaited_once_with("accounts/1/locations/2/reviews/a", "Grazie")

    second = client.post("/api/sync/google", headers=auth_headers).json()

    assert second["updated"] == 2
    assert second["inserted"] == 0
    refreshed = client.get("/api/reviews", headers=auth_headers).json()["data"]
    again = next(r for r in refreshed if r["id"] == review["id"])
    assert again["reply"]["text"] == "Grazie"


def test_sync_upstream_failure(client, auth_headers, google):
    google.get_accounts.side_effect = UpstreamFailure("google returned HTTP 403")

    response = client.post("/api/sync/google", headers=auth_headers)

    assert response.status_code == 502
    assert response.json() == {"success": False, "error": "google returned HTTP 403"}
