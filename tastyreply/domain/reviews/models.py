"""Review domain types shared by stores, services and the web layer."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TypedDict


class Platform(str, Enum):
    GOOGLE = "google"
    FACEBOOK = "facebook"
    YELP = "yelp"
    TRIPADVISOR = "tripadvisor"


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    APOLOGETIC = "apologetic"
    ENTHUSIASTIC = "enthusiastic"


# Fixed generation order; callers index into generated replies by this order.
TONES: tuple[Tone, ...] = (
    Tone.PROFESSIONAL,
    Tone.FRIENDLY,
    Tone.APOLOGETIC,
    Tone.ENTHUSIASTIC,
)


class RatingBand(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Sentiment(str, Enum):
    POSITIVE = "positive"
    NEUTRAL = "neutral"
    NEGATIVE = "negative"


def rating_band(rating: int) -> RatingBand:
    """Bucket a 1-5 star rating.

    Examples:
        >>> rating_band(5)
        <RatingBand.HIGH: 'high'>
        >>> rating_band(3)
        <RatingBand.MEDIUM: 'medium'>
        >>> rating_band(1)
        <RatingBand.LOW: 'low'>

    """
    if rating >= 4:
        return RatingBand.HIGH
    if rating == 3:
        return RatingBand.MEDIUM
    return RatingBand.LOW


class BusinessInfo(TypedDict):
    """Business context embedded into prompts."""

    business_name: str
    business_type: str


DEFAULT_BUSINESS_NAME = "our restaurant"
DEFAULT_BUSINESS_TYPE = "restaurant"


def business_info(
    business_name: str | None = None,
    business_type: str | None = None,
    *,
    default_name: str = DEFAULT_BUSINESS_NAME,
    default_type: str = DEFAULT_BUSINESS_TYPE,
) -> BusinessInfo:
    """Build BusinessInfo, replacing unset or blank fields with defaults."""
    name = (business_name or "").strip() or default_name
    kind = (business_type or "").strip() or default_type
    return BusinessInfo(business_name=name, business_type=kind)


class ReplyInfo(TypedDict):
    text: str
    timestamp: datetime
    author: str | None


class ReviewRecord(TypedDict, total=False):
    """A customer review owned by one user account.

    (platform, platform_review_id, user_id) is unique.
    """

    id: str
    user_id: str
    platform: str
    platform_review_id: str
    business_id: str | None
    customer_name: str
    rating: int
    text: str
    review_date: datetime | None
    replied: bool
    reply: ReplyInfo | None
    sentiment: str | None
    keywords: list[str]
    synced_at: datetime


class ReplyCandidate(TypedDict):
    text: str
    tone: str
    source: str  # "ai" | "fallback"
    generated_at: datetime


class GenerationSession(TypedDict):
    """Generated candidates for one (review, user) and the operator's resolution."""

    id: str
    review_id: str
    user_id: str
    generated_replies: list[ReplyCandidate]
    selected_reply: str | None
    edited: bool
    final_reply: str | None
    posted: bool
    posted_at: datetime | None
    created_at: datetime


__all__ = [
    "Platform",
    "Tone",
    "TONES",
    "RatingBand",
    "Sentiment",
    "rating_band",
    "BusinessInfo",
    "business_info",
    "DEFAULT_BUSINESS_NAME",
    "DEFAULT_BUSINESS_TYPE",
    "ReplyInfo",
    "ReviewRecord",
    "ReplyCandidate",
    "GenerationSession",
]
