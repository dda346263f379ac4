"""Current user profile."""

from __future__ import annotations

from fastapi import APIRouter

from tastyreply.core.errors import NotFound
from tastyreply.web.deps import CurrentUser, Store

router = APIRouter()


@router.get("/user")
def get_user(store: Store, user: CurrentUser) -> dict:
    profile = store.get_user(user.user_id)
    if profile is None:
        raise NotFound("User not found")

    return {
        "success": True,
        "user": {
            "id": profile["id"],
            "name": profile["name"],
            "email": profile["email"],
            "picture": profile["picture"],
            "avatar": profile["picture"],
            "provider": user.provider,
        },
    }
