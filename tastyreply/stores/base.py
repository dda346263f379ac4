"""Review record store interface.

Both backends (SQL and in-memory) implement the same contract so callers
never branch on which one is active.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Any

from tastyreply.domain.reviews.models import GenerationSession, ReplyCandidate, ReviewRecord

# Fields a re-sync may overwrite; replied/reply are never among them.
MUTABLE_REVIEW_FIELDS = (
    "customer_name",
    "rating",
    "text",
    "review_date",
    "business_id",
    "sentiment",
    "keywords",
    "synced_at",
)


def as_utc(value: datetime | None) -> datetime | None:
    """Treat naive datetimes as UTC; everything stored is UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def review_fields(record: dict[str, Any], now: datetime) -> dict[str, Any]:
    """MUTABLE_REVIEW_FIELDS of an ingestion record with defaults applied.

    Dates are normalised to UTC-aware values so both backends order them alike.
    """
    return {
        "business_id": record.get("business_id"),
        "customer_name": record.get("customer_name") or "",
        "rating": record["rating"],
        "text": record.get("text") or "",
        "review_date": as_utc(record.get("review_date")),
        "sentiment": record.get("sentiment"),
        "keywords": list(record.get("keywords") or []),
        "synced_at": as_utc(record.get("synced_at")) or now,
    }


class ReviewStore(ABC):
    """Persistence contract for reviews, generation sessions and users."""

    backend: str = "abstract"

    @abstractmethod
    def ping(self) -> bool:
        """Return True if the backend is reachable."""

    # --- reviews ---

    @abstractmethod
    def upsert_review(self, record: dict[str, Any]) -> tuple[ReviewRecord, bool]:
        """Insert or update keyed by (platform, platform_review_id, user_id).

        On conflict only MUTABLE_REVIEW_FIELDS are overwritten. An existing
        reply is kept; ``existing_reply`` (a reply already present on the
        platform) is applied only while the stored review has none.

        Returns:
            (stored record, True if a new record was inserted)

        """

    @abstractmethod
    def list_reviews(
        self, user_id: str, limit: int | None = 50, offset: int = 0
    ) -> list[ReviewRecord]:
        """Reviews owned by ``user_id``, newest first."""

    @abstractmethod
    def count_reviews(self, user_id: str) -> int: ...

    @abstractmethod
    def get_review(self, review_id: str, user_id: str) -> ReviewRecord:
        """Raises NotFound if missing, Forbidden if owned by someone else."""

    @abstractmethod
    def attach_reply(
        self, review_id: str, user_id: str, text: str, author: str | None
    ) -> ReviewRecord:
        """Mark the review replied with ``text``.

        The update matches id and owner in one conditional write. Raises
        NotFound if no review has that id, Forbidden if another user owns it
        (the review is left unchanged).
        """

    @abstractmethod
    def delete_review(self, review_id: str, user_id: str) -> None:
        """Delete a review and its generation session."""

    # --- generation sessions ---

    @abstractmethod
    def save_generation(
        self, review_id: str, user_id: str, replies: list[ReplyCandidate]
    ) -> GenerationSession:
        """Store candidates for (review, user), replacing any earlier session."""

    @abstractmethod
    def resolve_generation(
        self,
        session_id: str,
        user_id: str,
        *,
        selected_reply: str | None,
        edited: bool,
        final_reply: str | None,
    ) -> GenerationSession:
        """Record the operator's choice. Raises NotFound for unknown/foreign sessions."""

    @abstractmethod
    def mark_generation_posted(self, review_id: str, user_id: str) -> None:
        """Flag the (review, user) session as posted, if one exists."""

    # --- users ---

    @abstractmethod
    def upsert_user(
        self, *, google_id: str, email: str | None, name: str | None, picture: str | None
    ) -> dict[str, Any]:
        """Create or refresh the account for a Google subject."""

    @abstractmethod
    def get_user(self, user_id: str) -> dict[str, Any] | None: ...


__all__ = ["ReviewStore", "MUTABLE_REVIEW_FIELDS", "as_utc", "review_fields"]
