"""Google OAuth and Business Profile clients.

Thin wrappers around BaseHTTPClient for the authorization-code login flow
and review listing/replying.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlencode

from tastyreply.clients.http import BaseHTTPClient
from tastyreply.core.config import Settings
from tastyreply.core.errors import UpstreamFailure

AUTH_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"

ACCOUNTS_URL = "https://mybusinessaccountmanagement.googleapis.com/v1/accounts"
LOCATIONS_URL = "https://mybusinessbusinessinformation.googleapis.com/v1/{account}/locations"
REVIEWS_BASE = "https://mybusiness.googleapis.com/v4"

SCOPES = (
    "openid",
    "https://www.googleapis.com/auth/userinfo.profile",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/business.manage",
)

STAR_RATINGS = {"ONE": 1, "TWO": 2, "THREE": 3, "FOUR": 4, "FIVE": 5}


class GoogleOAuthClient:
    """Authorization-code exchange and user profile lookup."""

    def __init__(self, settings: Settings):
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_redirect_uri
        self.http = BaseHTTPClient(
            "https://oauth2.googleapis.com",
            service="google",
            timeout_sec=settings.http_timeout_seconds,
            max_retries=settings.http_max_retries,
        )

    def authorization_url(self, state: str | None = None) -> str:
        """Build the consent screen URL."""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(SCOPES),
            "access_type": "offline",
            "prompt": "consent",
        }
        if state:
            params["state"] = state
        return f"{AUTH_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str) -> dict[str, Any]:
        """Exchange an authorization code for tokens.

        Returns:
            Token response (access_token, refresh_token, id_token, expires_in, ...)

        """
        tokens = await self.http.json(
            "POST",
            TOKEN_URL,
            data={
                "code": code,
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "redirect_uri": self.redirect_uri,
                "grant_type": "authorization_code",
            },
        )
        if not tokens.get("access_token"):
            raise UpstreamFailure("Google token exchange returned no access token")
        return tokens

    async def userinfo(self, access_token: str) -> dict[str, Any]:
        """Fetch the OpenID profile (sub, email, name, picture)."""
        profile = await self.http.json(
            "GET", USERINFO_URL, headers={"Authorization": f"Bearer {access_token}"}
        )
        if not profile.get("sub"):
            raise UpstreamFailure("Google profile has no subject")
        return profile

    async def close(self) -> None:
        await self.http.close()


class GoogleReviewsClient:
    """Business Profile accounts, locations and reviews for one access token."""

    def __init__(self, access_token: str, timeout_sec: int = 30, max_retries: int = 3):
        self.http = BaseHTTPClient(
            REVIEWS_BASE,
            service="google",
            default_headers={"Authorization": f"Bearer {access_token}"},
            timeout_sec=timeout_sec,
            max_retries=max_retries,
            rate_limit_per_min=300,
        )

    async def get_accounts(self) -> list[dict[str, Any]]:
        data = await self.http.json("GET", ACCOUNTS_URL)
        return data.get("accounts", [])

    async def get_locations(self, account_name: str) -> list[dict[str, Any]]:
        data = await self.http.json(
            "GET",
            LOCATIONS_URL.format(account=account_name),
            params={"readMask": "name,title", "pageSize": 100},
        )
        return data.get("locations", [])

    async def get_reviews(self, account_name: str, location_name: str) -> list[dict[str, Any]]:
        """List all reviews for a location, following pagination."""
        reviews: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": 50}
            if page_token:
                params["pageToken"] = page_token
            data = await self.http.json(
                "GET", f"/{account_name}/{location_name}/reviews", params=params
            )
            reviews.extend(data.get("reviews", []))
            page_token = data.get("nextPageToken")
            if not page_token:
                return reviews

    async def reply_to_review(self, review_name: str, comment: str) -> dict[str, Any]:
        """Create or update the owner reply on a review."""
        return await self.http.json("PUT", f"/{review_name}/reply", json_body={"comment": comment})

    async def close(self) -> None:
        await self.http.close()


def _parse_time(value: str | None) -> datetime | None:
    if not value:
        return None
    # Google sends up to nanosecond precision; fromisoformat takes microseconds
    head, _, frac = value.rstrip("Z").partition(".")
    stamp = f"{head}.{frac[:6]}" if frac else head
    try:
        return datetime.fromisoformat(stamp).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def normalize_google_review(raw: dict[str, Any]) -> dict[str, Any]:
    """Map a Business Profile review onto ingestion fields.

    Examples:
        >>> normalize_google_review(
        ...     {"name": "accounts/1/locations/2/reviews/3", "starRating": "FOUR",
        ...      "reviewer": {"displayName": "Mike"}, "comment": "Good"}
        ... )["rating"]
        4

    """
    star = raw.get("starRating")
    rating = STAR_RATINGS.get(star, star) if isinstance(star, str) else star
    created = raw.get("createTime")
    reply = raw.get("reviewReply") or {}

    return {
        "platform": "google",
        "platform_review_id": raw.get("name") or raw.get("reviewId"),
        "customer_name": (raw.get("reviewer") or {}).get("displayName") or "Anonymous",
        "rating": rating,
        "text": raw.get("comment") or "",
        "review_date": _parse_time(created),
        "existing_reply": reply.get("comment"),
    }


__all__ = [
    "GoogleOAuthClient",
    "GoogleReviewsClient",
    "normalize_google_review",
    "STAR_RATINGS",
    "SCOPES",
]
