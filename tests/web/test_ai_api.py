"""Tests for reply generation endpoints."""

from __future__ import annotations


def _review_id(client, headers, payload) -> str:
    return client.post("/api/reviews", json=payload, headers=headers).json()["data"]["id"]


def test_generate_single_reply(client, auth_headers):
    response = client.post(
        "/api/ai/generate-reply",
        json={"reviewText": "Lovely evening", "rating": 5, "tone": "friendly"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["reply"] == "AI friendly reply"
    assert data["tone"] == "friendly"
    assert data["source"] == "ai"
    assert "generatedAt" in data


def test_generate_single_reply_defaults_to_professional(client, auth_headers):
    response = client.post("/api/ai/generate-reply", json={"rating": 3}, headers=auth_headers)

    assert response.json()["data"]["tone"] == "professional"


def test_generate_single_reply_rejects_bad_rating(client, auth_headers):
    response = client.post("/api/ai/generate-reply", json={"rating": 0}, headers=auth_headers)

    assert response.status_code == 400
    assert response.json()["success"] is False


def test_generate_for_review(client, auth_headers, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)

    response = client.post(
        f"/api/ai/generate-reply/{review_id}",
        json={"businessInfo": {"businessName": "Trattoria Roma"}},
        headers=auth_headers,
    )

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert [r["tone"] for r in body["replies"]] == [
        "professional",
        "friendly",
        "apologetic",
        "enthusiastic",
    ]
    assert all(r["source"] == "ai" for r in body["replies"])
    assert body["aiReplyId"]


def test_generate_for_review_without_body(client, auth_headers, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)

    response = client.post(f"/api/ai/generate-reply/{review_id}", headers=auth_headers)

    assert response.status_code == 200
    assert len(response.json()["replies"]) == 4


def test_generate_falls_back_when_completion_fails(client, auth_headers, review_payload, completion):
    completion.complete.side_effect = RuntimeError("boom")
    review_id = _review_id(client, auth_headers, review_payload)

    body = client.post(f"/api/ai/generate-reply/{review_id}", headers=auth_headers).json()

    assert len(body["replies"]) == 4
    assert {r["source"] for r in body["replies"]} == {"fallback"}
    assert all(r["text"] for r in body["replies"])


def test_generate_for_missing_review(client, auth_headers):
    response = client.post("/api/ai/generate-reply/nope", headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Review not found"}


def test_regenerate_reuses_session(client, auth_headers, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)

    first = client.post(f"/api/ai/generate-reply/{review_id}", headers=auth_headers).json()
    second = client.post(f"/api/ai/generate-reply/{review_id}", headers=auth_headers).json()

    assert first["aiReplyId"] == second["aiReplyId"]


def test_save_reply(client, auth_headers, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)
    ai_reply_id = client.post(
        f"/api/ai/generate-reply/{review_id}", headers=auth_headers
    ).json()["aiReplyId"]

    response = client.post(
        f"/api/ai/save-reply/{ai_reply_id}",
        json={"selectedReply": "AI friendly reply", "edited": True, "finalReply": "Edited!"},
        headers=auth_headers,
    )

    assert response.status_code == 200
    saved = response.json()["aiReply"]
    assert saved["id"] == ai_reply_id
    assert saved["reviewId"] == review_id
    assert saved["selectedReply"] == "AI friendly reply"
    assert saved["edited"] is True
    assert saved["finalReply"] == "Edited!"
    assert saved["posted"] is False


def test_posting_reply_marks_session_posted(client, auth_headers, review_payload, memory_store):
    review_id = _review_id(client, auth_headers, review_payload)
    ai_reply_id = client.post(
        f"/api/ai/generate-reply/{review_id}", headers=auth_headers
    ).json()["aiReplyId"]

    client.post(f"/api/reviews/{review_id}/reply", json={"reply": "Thanks"}, headers=auth_headers)
    saved = client.post(
        f"/api/ai/save-reply/{ai_reply_id}", json={"finalReply": "Thanks"}, headers=auth_headers
    ).json()["aiReply"]

    assert saved["posted"] is True
    assert saved["postedAt"] is not None


def test_save_unknown_reply(client, auth_headers):
    response = client.post("/api/ai/save-reply/missing", json={}, headers=auth_headers)

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "AI reply not found"}


def test_save_other_users_reply(client, auth_headers, make_token, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)
    ai_reply_id = client.post(
        f"/api/ai/generate-reply/{review_id}", headers=auth_headers
    ).json()["aiReplyId"]
    other = {"Authorization": f"Bearer {make_token('user-b')}"}

    response = client.post(f"/api/ai/save-reply/{ai_reply_id}", json={}, headers=other)

    assert response.status_code == 404


def test_analyze_review(client, auth_headers, review_payload):
    review_id = _review_id(client, auth_headers, review_payload)

    response = client.post(f"/api/ai/analyze/{review_id}", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["sentiment"] == "positive"
    assert "pasta" in data["keywords"]
