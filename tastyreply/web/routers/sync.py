"""Review platform sync endpoints."""

from __future__ import annotations

from fastapi import APIRouter

from tastyreply.core.errors import Unauthorized
from tastyreply.services.reviews_service import sync_google_reviews
from tastyreply.web.deps import CurrentUser, GoogleClient, Store

router = APIRouter()


@router.post("/google")
async def sync_google(store: Store, user: CurrentUser, google: GoogleClient) -> dict:
    """Pull the caller's Google Business Profile reviews into the store."""
    if google is None:
        raise Unauthorized("Google authentication required")

    counts = await sync_google_reviews(store, google, user.user_id)
    return {
        "success": True,
        "syncedCount": counts["synced"],
        "inserted": counts["inserted"],
        "updated": counts["updated"],
        "skipped": counts["skipped"],
    }
