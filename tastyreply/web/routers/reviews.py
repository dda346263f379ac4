"""Reviews API endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Query

from tastyreply.services.reviews_service import ingest_review, post_reply
from tastyreply.web.deps import CurrentUser, GoogleClient, Store
from tastyreply.web.schemas import ReplyRequest, ReviewIn, dump_review

router = APIRouter()


@router.get("")
def get_reviews(
    store: Store,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=200, description="Max reviews to return"),
    offset: int = Query(0, ge=0, description="Offset for pagination"),
) -> dict:
    """List the caller's reviews, newest first."""
    reviews = store.list_reviews(user.user_id, limit=limit, offset=offset)
    return {
        "success": True,
        "data": [dump_review(r) for r in reviews],
        "total": store.count_reviews(user.user_id),
    }


@router.post("")
def create_review(payload: ReviewIn, store: Store, user: CurrentUser) -> dict:
    """Import one review; re-importing the same external review updates it."""
    review, created = ingest_review(store, user.user_id, payload.model_dump())
    return {"success": True, "data": dump_review(review), "created": created}


@router.post("/{review_id}/reply")
async def post_review_reply(
    review_id: str,
    payload: ReplyRequest,
    store: Store,
    user: CurrentUser,
    google: GoogleClient,
) -> dict:
    """Post reply to a review.

    Google reviews are answered on Google first when the caller signed in
    with Google; the review is then marked replied.
    """
    review = await post_reply(
        store,
        review_id=review_id,
        user_id=user.user_id,
        text=payload.reply,
        author=user.name,
        google_client=google,
    )
    return {"success": True, "message": "Reply posted successfully", "data": dump_review(review)}
