"""In-memory review store.

Used when no database is reachable and in tests. Holds the same ingestion and
reply-attachment contract as the SQL store; all mutations run under one lock.

A store built with ``demo_reviews`` copies them into every user's collection
the first time that user's reviews are listed or counted.
"""

from __future__ import annotations

import copy
import threading
import uuid
from collections.abc import Iterable
from datetime import datetime, timezone
from typing import Any

from tastyreply.core.errors import Forbidden, NotFound
from tastyreply.domain.reviews.models import (
    GenerationSession,
    ReplyCandidate,
    ReplyInfo,
    ReviewRecord,
)
from tastyreply.stores.base import ReviewStore, review_fields

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _sort_key(review: ReviewRecord) -> datetime:
    return review.get("review_date") or review.get("synced_at") or _EPOCH


class InMemoryReviewStore(ReviewStore):
    backend = "memory"

    def __init__(self, demo_reviews: Iterable[dict[str, Any]] = ()) -> None:
        self._lock = threading.Lock()
        self._reviews: dict[str, ReviewRecord] = {}
        self._by_key: dict[tuple[str, str, str], str] = {}
        self._sessions: dict[str, GenerationSession] = {}
        self._users: dict[str, dict[str, Any]] = {}
        self._demo_reviews = [dict(r) for r in demo_reviews]
        self._seeded: set[str] = set()

    def ping(self) -> bool:
        return True

    def _seed(self, user_id: str) -> None:
        # Caller holds the lock
        if not self._demo_reviews or user_id in self._seeded:
            return
        self._seeded.add(user_id)
        for demo in self._demo_reviews:
            self._upsert({**demo, "user_id": user_id})

    def _upsert(self, record: dict[str, Any]) -> tuple[ReviewRecord, bool]:
        key = (record["platform"], record["platform_review_id"], record["user_id"])
        now = datetime.now(timezone.utc)
        existing_reply = record.get("existing_reply")
        fields = review_fields(record, now)

        review_id = self._by_key.get(key)
        if review_id is not None:
            stored = self._reviews[review_id]
            stored.update(fields)
            if existing_reply and not stored["replied"]:
                stored["replied"] = True
                stored["reply"] = ReplyInfo(text=existing_reply, timestamp=now, author=None)
            return stored, False

        review_id = record.get("id") or uuid.uuid4().hex
        stored = ReviewRecord(
            id=review_id,
            user_id=record["user_id"],
            platform=record["platform"],
            platform_review_id=record["platform_review_id"],
            replied=bool(existing_reply),
            reply=(
                ReplyInfo(text=existing_reply, timestamp=now, author=None)
                if existing_reply
                else None
            ),
            **fields,
        )
        self._reviews[review_id] = stored
        self._by_key[key] = review_id
        return stored, True

    def upsert_review(self, record: dict[str, Any]) -> tuple[ReviewRecord, bool]:
        with self._lock:
            stored, created = self._upsert(record)
            return copy.deepcopy(stored), created

    def list_reviews(
        self, user_id: str, limit: int | None = 50, offset: int = 0
    ) -> list[ReviewRecord]:
        with self._lock:
            self._seed(user_id)
            owned = [r for r in self._reviews.values() if r["user_id"] == user_id]
            owned.sort(key=_sort_key, reverse=True)
            end = None if limit is None else offset + limit
            return copy.deepcopy(owned[offset:end])

    def count_reviews(self, user_id: str) -> int:
        with self._lock:
            self._seed(user_id)
            return sum(1 for r in self._reviews.values() if r["user_id"] == user_id)

    def _owned(self, review_id: str, user_id: str) -> ReviewRecord:
        review = self._reviews.get(review_id)
        if review is None:
            raise NotFound("Review not found")
        if review["user_id"] != user_id:
            raise Forbidden("Unauthorized")
        return review

    def get_review(self, review_id: str, user_id: str) -> ReviewRecord:
        with self._lock:
            return copy.deepcopy(self._owned(review_id, user_id))

    def attach_reply(
        self, review_id: str, user_id: str, text: str, author: str | None
    ) -> ReviewRecord:
        with self._lock:
            review = self._owned(review_id, user_id)
            review["replied"] = True
            review["reply"] = ReplyInfo(
                text=text, timestamp=datetime.now(timezone.utc), author=author
            )
            return copy.deepcopy(review)

    def delete_review(self, review_id: str, user_id: str) -> None:
        with self._lock:
            review = self._owned(review_id, user_id)
            del self._reviews[review_id]
            self._by_key.pop(
                (review["platform"], review["platform_review_id"], review["user_id"]), None
            )
            for sid in [s["id"] for s in self._sessions.values() if s["review_id"] == review_id]:
                del self._sessions[sid]

    def _session_for(self, review_id: str, user_id: str) -> GenerationSession | None:
        for session in self._sessions.values():
            if session["review_id"] == review_id and session["user_id"] == user_id:
                return session
        return None

    def save_generation(
        self, review_id: str, user_id: str, replies: list[ReplyCandidate]
    ) -> GenerationSession:
        with self._lock:
            self._owned(review_id, user_id)
            existing = self._session_for(review_id, user_id)
            session = GenerationSession(
                id=existing["id"] if existing else uuid.uuid4().hex,
                review_id=review_id,
                user_id=user_id,
                generated_replies=copy.deepcopy(replies),
                selected_reply=None,
                edited=False,
                final_reply=None,
                posted=False,
                posted_at=None,
                created_at=datetime.now(timezone.utc),
            )
            self._sessions[session["id"]] = session
            return copy.deepcopy(session)

    def resolve_generation(
        self,
        session_id: str,
        user_id: str,
        *,
        selected_reply: str | None,
        edited: bool,
        final_reply: str | None,
    ) -> GenerationSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session["user_id"] != user_id:
                raise NotFound("AI reply not found")
            session["selected_reply"] = selected_reply
            session["edited"] = edited
            session["final_reply"] = final_reply
            return copy.deepcopy(session)

    def mark_generation_posted(self, review_id: str, user_id: str) -> None:
        with self._lock:
            session = self._session_for(review_id, user_id)
            if session is not None:
                session["posted"] = True
                session["posted_at"] = datetime.now(timezone.utc)

    def upsert_user(
        self, *, google_id: str, email: str | None, name: str | None, picture: str | None
    ) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        with self._lock:
            user = next((u for u in self._users.values() if u["google_id"] == google_id), None)
            if user is None:
                user = {"id": uuid.uuid4().hex, "google_id": google_id, "created_at": now}
                self._users[user["id"]] = user
            user.update(email=email, name=name, picture=picture, last_login=now)
            return dict(user)

    def get_user(self, user_id: str) -> dict[str, Any] | None:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user else None


__all__ = ["InMemoryReviewStore"]
