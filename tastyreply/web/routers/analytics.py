"""Dashboard analytics endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from tastyreply.services.analytics_service import compute_analytics
from tastyreply.web.deps import CurrentUser, Store

router = APIRouter()


@router.get("")
def get_analytics(store: Store, user: CurrentUser) -> dict:
    """Totals, response rate, average rating and breakdowns over all of the caller's reviews."""
    reviews = store.list_reviews(user.user_id, limit=None)
    return {"success": True, "data": compute_analytics(reviews)}
