"""Google sign-in (OAuth2 authorization-code flow)."""

from __future__ import annotations

from urllib.parse import urlencode

from fastapi import APIRouter
from fastapi.responses import RedirectResponse

from tastyreply.core.errors import AppError, InternalError
from tastyreply.core.logging import get_logger
from tastyreply.web.auth import issue_token
from tastyreply.web.deps import AppSettings, OAuthClient, Store

router = APIRouter()
log = get_logger("tastyreply.auth")


def _error_redirect(frontend_url: str, reason: str) -> RedirectResponse:
    return RedirectResponse(f"{frontend_url}/auth-error?{urlencode({'error': reason})}")


@router.get("/google")
def google_login(oauth: OAuthClient) -> RedirectResponse:
    """Redirect to the Google consent screen."""
    if not oauth.client_id:
        raise InternalError("Failed to initiate OAuth")
    return RedirectResponse(oauth.authorization_url())


@router.get("/google/callback")
async def google_callback(
    oauth: OAuthClient,
    store: Store,
    settings: AppSettings,
    code: str | None = None,
) -> RedirectResponse:
    """Exchange the code, upsert the user and hand a JWT to the dashboard."""
    if not code:
        return _error_redirect(settings.frontend_url, "no_code")

    try:
        tokens = await oauth.exchange_code(code)
        profile = await oauth.userinfo(tokens["access_token"])
        user = store.upsert_user(
            google_id=profile["sub"],
            email=profile.get("email"),
            name=profile.get("name"),
            picture=profile.get("picture"),
        )
    except AppError as e:
        log.error("oauth_callback_failed", extra={"error": e.message})
        return _error_redirect(settings.frontend_url, "callback_failed")

    token = issue_token(
        settings,
        user_id=user["id"],
        email=user["email"],
        name=user["name"],
        google_id=user["google_id"],
        access_token=tokens["access_token"],
    )
    log.info("user_signed_in", extra={"user_id": user["id"]})
    return RedirectResponse(f"{settings.frontend_url}/dashboard?{urlencode({'token': token})}")
