"""Tests for configuration management."""

import pytest

from tastyreply.core.config import Settings, get_settings


@pytest.fixture(autouse=True)
def _fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


def test_settings_loads_from_env(monkeypatch):
    """Test that settings load correctly from environment variables."""
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setenv("OPENAI_API_KEY", "sk-xxx")
    monkeypatch.setenv("DATABASE_URL", "sqlite:///./test.db")
    monkeypatch.setenv("REVIEW_STORE_BACKEND", "memory")
    monkeypatch.setenv("RATE_LIMIT_PER_MIN", "30")

    s = Settings(_env_file=None)
    assert s.jwt_secret == "s3cret"
    assert s.openai_api_key == "sk-xxx"
    assert s.database_url.startswith("sqlite:///")
    assert s.review_store_backend == "memory"
    assert s.rate_limit_per_min == 30


def test_settings_defaults(monkeypatch):
    """Test that optional fields have correct defaults."""
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)

    s = Settings(_env_file=None)
    assert s.openai_api_key is None
    assert s.openai_model == "gpt-3.5-turbo"
    assert s.jwt_expires_days == 7
    assert s.frontend_url == "http://localhost:3000"
    assert s.default_business_name == "our restaurant"
    assert s.default_business_type == "restaurant"
    assert s.fallback_seed is None
    assert s.rate_limit_per_min == 100
    assert s.http_timeout_seconds == 30
    assert s.is_development is False


def test_get_settings_reports_missing_secret(monkeypatch):
    monkeypatch.delenv("JWT_SECRET", raising=False)
    monkeypatch.setitem(Settings.model_config, "env_file", None)

    with pytest.raises(RuntimeError, match="JWT_SECRET"):
        get_settings()


def test_get_settings_is_cached(monkeypatch):
    monkeypatch.setenv("JWT_SECRET", "s3cret")
    monkeypatch.setitem(Settings.model_config, "env_file", None)

    assert get_settings() is get_settings()


@pytest.mark.parametrize("env, expected", [("development", True), ("Development", True), ("production", False)])
def test_is_development(env, expected):
    assert Settings(_env_file=None, jwt_secret="x", environment=env).is_development is expected
