"""Pydantic schemas for API requests and responses.

Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from tastyreply.domain.reviews.models import GenerationSession, ReviewRecord, Tone


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# Reviews schemas
class ReplyDTO(CamelModel):
    text: str
    timestamp: datetime | None = None
    author: str | None = None


class ReviewDTO(CamelModel):
    """Review data transfer object."""

    id: str
    platform: str
    platform_review_id: str
    business_id: str | None = None
    customer_name: str = ""
    rating: int
    text: str = ""
    review_date: datetime | None = None
    replied: bool = False
    reply: ReplyDTO | None = None
    sentiment: str | None = None
    keywords: list[str] = Field(default_factory=list)
    synced_at: datetime | None = None


class ReviewIn(CamelModel):
    """Manually imported review."""

    platform: str
    platform_review_id: str
    rating: int
    text: str = ""
    customer_name: str = ""
    review_date: datetime | None = None
    business_id: str | None = None


class ReplyRequest(BaseModel):
    """Request to reply to a review."""

    reply: str = Field(..., max_length=4000)


# AI schemas
class BusinessInfoIn(CamelModel):
    business_name: str | None = None
    business_type: str | None = None


class GenerateReplyRequest(CamelModel):
    """Single-shot reply for free text (no stored review)."""

    review_text: str | None = ""
    rating: int = Field(..., ge=1, le=5)
    customer_name: str | None = None
    business_type: str | None = None
    business_name: str | None = None
    tone: Tone = Tone.PROFESSIONAL


class GenerateForReviewRequest(CamelModel):
    business_info: BusinessInfoIn | None = None


class SaveReplyRequest(CamelModel):
    selected_reply: str | None = None
    edited: bool = False
    final_reply: str | None = None


class CandidateDTO(CamelModel):
    text: str
    tone: str
    source: str
    generated_at: datetime


class GenerationSessionDTO(CamelModel):
    id: str
    review_id: str
    generated_replies: list[CandidateDTO]
    selected_reply: str | None = None
    edited: bool = False
    final_reply: str | None = None
    posted: bool = False
    posted_at: datetime | None = None
    created_at: datetime | None = None


def dump_review(review: ReviewRecord) -> dict[str, Any]:
    return ReviewDTO.model_validate(review).model_dump(by_alias=True, mode="json")


def dump_session(session: GenerationSession) -> dict[str, Any]:
    return GenerationSessionDTO.model_validate(session).model_dump(by_alias=True, mode="json")


def dump_candidates(candidates: list) -> list[dict[str, Any]]:
    return [CandidateDTO.model_validate(c).model_dump(by_alias=True, mode="json") for c in candidates]
