"""Google Business Profile lookups."""

from __future__ import annotations

from fastapi import APIRouter

from tastyreply.core.errors import Unauthorized
from tastyreply.web.deps import CurrentUser, GoogleClient

router = APIRouter()


@router.get("/accounts")
async def get_accounts(user: CurrentUser, google: GoogleClient) -> dict:
    """Business Profile accounts the caller can manage."""
    if google is None:
        raise Unauthorized("Google authentication required")

    accounts = await google.get_accounts()
    return {
        "success": True,
        "accounts": [
            {
                "name": a.get("name"),
                "accountName": a.get("accountName"),
                "type": a.get("type"),
            }
            for a in accounts
        ],
    }
