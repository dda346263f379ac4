"""Review record stores."""

from __future__ import annotations

from tastyreply.stores.base import ReviewStore
from tastyreply.stores.factory import DEMO_REVIEWS, build_review_store
from tastyreply.stores.memory import InMemoryReviewStore
from tastyreply.stores.sql import SqlReviewStore

__all__ = [
    "DEMO_REVIEWS",
    "InMemoryReviewStore",
    "ReviewStore",
    "SqlReviewStore",
    "build_review_store",
]
