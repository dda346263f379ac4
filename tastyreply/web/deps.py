"""FastAPI dependencies for authentication, storage and collaborators."""

from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Annotated

from fastapi import Depends, Header, Request

from tastyreply.ai.replies import ReplyGenerator
from tastyreply.clients.google import GoogleOAuthClient, GoogleReviewsClient
from tastyreply.core.config import Settings
from tastyreply.stores.base import ReviewStore
from tastyreply.web.auth import CurrentUser as CurrentUserModel
from tastyreply.web.auth import parse_bearer, verify_token


def get_app_settings(request: Request) -> Settings:
    """Settings the app was built with."""
    return request.app.state.settings


def get_review_store(request: Request) -> ReviewStore:
    """Review store chosen at startup (SQL or in-memory fallback)."""
    return request.app.state.review_store


def get_reply_generator(request: Request) -> ReplyGenerator:
    return request.app.state.reply_generator


def current_user(
    settings: Annotated[Settings, Depends(get_app_settings)],
    authorization: Annotated[str | None, Header()] = None,
) -> CurrentUserModel:
    """Authenticate the bearer token.

    Raises:
        Unauthorized: No token (401)
        Forbidden: Invalid or expired token (403)

    """
    return verify_token(parse_bearer(authorization), settings)


async def get_oauth_client(
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AsyncIterator[GoogleOAuthClient]:
    client = GoogleOAuthClient(settings)
    try:
        yield client
    finally:
        await client.close()


async def get_google_reviews_client(
    user: Annotated[CurrentUserModel, Depends(current_user)],
    settings: Annotated[Settings, Depends(get_app_settings)],
) -> AsyncIterator[GoogleReviewsClient | None]:
    """Business Profile client for the caller, or None without a Google token."""
    if not user.access_token:
        yield None
        return
    client = GoogleReviewsClient(
        user.access_token,
        timeout_sec=settings.http_timeout_seconds,
        max_retries=settings.http_max_retries,
    )
    try:
        yield client
    finally:
        await client.close()


# Type aliases for cleaner endpoints
AppSettings = Annotated[Settings, Depends(get_app_settings)]
Store = Annotated[ReviewStore, Depends(get_review_store)]
Generator = Annotated[ReplyGenerator, Depends(get_reply_generator)]
CurrentUser = Annotated[CurrentUserModel, Depends(current_user)]
OAuthClient = Annotated[GoogleOAuthClient, Depends(get_oauth_client)]
GoogleClient = Annotated[GoogleReviewsClient | None, Depends(get_google_reviews_client)]
