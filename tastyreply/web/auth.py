"""Bearer-token authentication.

Handles:
- Signing app JWTs after Google sign-in
- Verifying ``Authorization: Bearer <token>`` on API requests
- Current user context (user id, profile, Google access token)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from tastyreply.core.config import Settings
from tastyreply.core.errors import Forbidden, Unauthorized
from tastyreply.core.logging import get_logger

log = get_logger("tastyreply.auth")


class CurrentUser:
    """Authenticated caller decoded from the bearer token."""

    def __init__(
        self,
        user_id: str,
        email: str | None = None,
        name: str | None = None,
        google_id: str | None = None,
        provider: str = "google",
        access_token: str | None = None,
    ):
        self.user_id = user_id
        self.email = email
        self.name = name
        self.google_id = google_id
        self.provider = provider
        self.access_token = access_token  # Google OAuth token, when signed in with Google

    def __repr__(self) -> str:
        return f"<CurrentUser user_id={self.user_id} provider={self.provider}>"


def issue_token(
    settings: Settings,
    *,
    user_id: str,
    email: str | None = None,
    name: str | None = None,
    google_id: str | None = None,
    access_token: str | None = None,
) -> str:
    """Sign an app JWT carrying ``userId``."""
    now = datetime.now(timezone.utc)
    claims: dict[str, Any] = {
        "userId": user_id,
        "googleId": google_id,
        "email": email,
        "name": name,
        "provider": "google",
        "iat": now,
        "exp": now + timedelta(days=settings.jwt_expires_days),
    }
    if access_token:
        claims["accessToken"] = access_token
    return jwt.encode(claims, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def parse_bearer(authorization: str | None) -> str:
    """Extract the token from an Authorization header.

    Raises:
        Unauthorized: Header missing or not a bearer token

    """
    scheme, _, token = (authorization or "").partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise Unauthorized("No token provided")
    return token.strip()


def verify_token(token: str, settings: Settings) -> CurrentUser:
    """Verify signature and expiry and build the caller.

    Raises:
        Forbidden: Bad signature, expired token or no ``userId`` claim

    """
    try:
        claims = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])
    except jwt.PyJWTError as e:
        log.warning("jwt_verification_failed", extra={"error": str(e)})
        raise Forbidden("Invalid token") from e

    user_id = claims.get("userId")
    if not user_id:
        raise Forbidden("Invalid token")

    return CurrentUser(
        user_id=str(user_id),
        email=claims.get("email"),
        name=claims.get("name"),
        google_id=claims.get("googleId"),
        provider=claims.get("provider") or "google",
        access_token=claims.get("accessToken"),
    )


__all__ = ["CurrentUser", "issue_token", "parse_bearer", "verify_token"]
