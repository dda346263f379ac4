"""Shared pytest fixtures and configuration."""

from __future__ import annotations

import os
from unittest.mock import AsyncMock, Mock

import pytest
from fastapi.testclient import TestClient

os.environ.setdefault("JWT_SECRET", "test-secret")

from tastyreply.ai.replies import ReplyGenerator
from tastyreply.core.config import Settings
from tastyreply.db.session import create_db_engine
from tastyreply.stores.memory import InMemoryReviewStore
from tastyreply.stores.sql import SqlReviewStore
from tastyreply.web.auth import issue_token
from tastyreply.web.deps import get_reply_generator, get_review_store
from tastyreply.web.main import create_app


def make_settings(**overrides) -> Settings:
    values = {
        "jwt_secret": "test-secret",
        "openai_api_key": None,
        "review_store_backend": "memory",
        "seed_demo_reviews": False,
        "database_url": "sqlite:///:memory:",
        "rate_limit_per_min": 100_000,
        "rate_limit_capacity": 100_000,
        "environment": "production",
        "log_level": "WARNING",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def memory_store() -> InMemoryReviewStore:
    return InMemoryReviewStore()


@pytest.fixture
def sql_store() -> SqlReviewStore:
    """SQL store on a private in-memory SQLite database."""
    engine = create_db_engine("sqlite:///:memory:")
    store = SqlReviewStore(engine)
    store.create_schema()
    yield store
    engine.dispose()


@pytest.fixture(params=["memory", "sql"])
def store(request):
    """Run a test against both store backends."""
    return request.getfixturevalue(f"{request.param}_store")


@pytest.fixture
def completion() -> Mock:
    """Completion collaborator that echoes the requested tone."""

    async def complete(system: str, prompt: str) -> str:
        tone = prompt.split()[2]  # "Write a <tone> response ..."
        return f"AI {tone} reply"

    fake = Mock()
    fake.complete = AsyncMock(side_effect=complete)
    return fake


@pytest.fixture
def generator(completion) -> ReplyGenerator:
    return ReplyGenerator(completion)


@pytest.fixture
def app(settings, memory_store, generator):
    """App wired to the in-memory store and a fake completion client."""
    application = create_app(settings)
    application.dependency_overrides[get_review_store] = lambda: memory_store
    application.dependency_overrides[get_reply_generator] = lambda: generator
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_token(settings):
    def _make(user_id: str = "user-a", **claims) -> str:
        return issue_token(settings, user_id=user_id, **claims)

    return _make


@pytest.fixture
def auth_headers(make_token) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token('user-a', name='Alice')}"}


@pytest.fixture
def review_payload() -> dict:
    return {
        "platform": "google",
        "platformReviewId": "g-1",
        "customerName": "Sarah Johnson",
        "rating": 5,
        "text": "Amazing food and excellent service! The pasta was perfectly cooked.",
    }
