"""Reply generation endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from tastyreply.core.logging import get_logger
from tastyreply.domain.reviews.classifier import classify_sentiment, extract_keywords
from tastyreply.domain.reviews.models import business_info
from tastyreply.web.deps import AppSettings, CurrentUser, Generator, Store
from tastyreply.web.schemas import (
    GenerateForReviewRequest,
    GenerateReplyRequest,
    SaveReplyRequest,
    dump_candidates,
    dump_session,
)

router = APIRouter()
log = get_logger("tastyreply.web.ai")


@router.post("/generate-reply")
async def generate_reply(
    payload: GenerateReplyRequest,
    generator: Generator,
    settings: AppSettings,
    user: CurrentUser,
) -> dict:
    """Generate one reply in the requested tone for free-standing review text."""
    business = business_info(
        payload.business_name,
        payload.business_type,
        default_name=settings.default_business_name,
        default_type=settings.default_business_type,
    )
    candidate = await generator.generate_one(
        rating=payload.rating,
        text=payload.review_text,
        customer_name=payload.customer_name,
        business=business,
        tone=payload.tone,
    )
    return {
        "success": True,
        "data": {
            "reply": candidate["text"],
            "tone": candidate["tone"],
            "source": candidate["source"],
            "generatedAt": candidate["generated_at"].isoformat(),
        },
    }


@router.post("/generate-reply/{review_id}")
async def generate_replies_for_review(
    review_id: str,
    store: Store,
    generator: Generator,
    settings: AppSettings,
    user: CurrentUser,
    payload: GenerateForReviewRequest | None = None,
) -> dict:
    """Generate one candidate per tone for a stored review.

    The candidates replace any earlier generation session for this review.
    """
    review = store.get_review(review_id, user.user_id)
    info = payload.business_info if payload and payload.business_info else None
    business = business_info(
        info.business_name if info else None,
        info.business_type if info else None,
        default_name=settings.default_business_name,
        default_type=settings.default_business_type,
    )

    replies = await generator.generate(
        rating=review["rating"],
        text=review.get("text"),
        customer_name=review.get("customer_name"),
        business=business,
    )
    session = store.save_generation(review_id, user.user_id, replies)
    log.info(
        "replies_generated",
        extra={
            "review_id": review_id,
            "fallbacks": sum(1 for r in replies if r["source"] == "fallback"),
        },
    )
    return {"success": True, "replies": dump_candidates(replies), "aiReplyId": session["id"]}


@router.post("/save-reply/{ai_reply_id}")
def save_reply(
    ai_reply_id: str,
    payload: SaveReplyRequest,
    store: Store,
    user: CurrentUser,
) -> dict:
    """Record which candidate the operator picked and the final text."""
    session = store.resolve_generation(
        ai_reply_id,
        user.user_id,
        selected_reply=payload.selected_reply,
        edited=payload.edited,
        final_reply=payload.final_reply,
    )
    return {"success": True, "aiReply": dump_session(session)}


@router.post("/analyze/{review_id}")
def analyze_review(review_id: str, store: Store, user: CurrentUser) -> dict:
    review = store.get_review(review_id, user.user_id)
    text = review.get("text")
    return {
        "success": True,
        "data": {
            "sentiment": classify_sentiment(rating=review["rating"], text=text).value,
            "keywords": extract_keywords(text),
        },
    }
