"""Configuration management with pydantic-settings.

Provides type-safe configuration with environment variable validation.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings with environment variable validation."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Auth (JWT) ===
    jwt_secret: str = Field(..., description="Secret used to sign and verify app JWTs")
    jwt_algorithm: str = Field("HS256", description="JWT signing algorithm")
    jwt_expires_days: int = Field(7, description="Lifetime of issued JWTs in days")

    # === Google OAuth / Business Profile ===
    google_client_id: str = Field("", description="Google OAuth client ID")
    google_client_secret: str = Field("", description="Google OAuth client secret")
    google_redirect_uri: str = Field(
        "http://localhost:5001/auth/google/callback",
        description="OAuth redirect URI registered with Google",
    )
    frontend_url: str = Field("http://localhost:3000", description="Dashboard origin (CORS)")

    # === OpenAI ===
    openai_api_key: str | None = Field(None, description="OpenAI API key (None -> fallback only)")
    openai_model: str = Field("gpt-3.5-turbo", description="OpenAI chat model")
    openai_timeout_seconds: float = Field(15.0, description="Per-call completion timeout")
    openai_max_tokens: int = Field(150, description="Max tokens per generated reply")
    openai_temperature: float = Field(0.7, description="Sampling temperature")

    # === Reply generation ===
    default_business_name: str = Field("our restaurant", description="Business name fallback")
    default_business_type: str = Field("restaurant", description="Business type fallback")
    fallback_seed: int | None = Field(
        None, description="Seed for fallback template variety (None -> always first variant)"
    )

    # === Storage ===
    database_url: str = Field("sqlite:///./tastyreply.db", description="SQLAlchemy database URL")
    review_store_backend: str = Field("sql", description="Review store backend: sql | memory")
    seed_demo_reviews: bool = Field(
        True, description="Seed the in-memory store with demo reviews"
    )

    # === HTTP ===
    http_timeout_seconds: int = Field(30, description="Outbound HTTP request timeout in seconds")
    http_max_retries: int = Field(3, description="Maximum outbound HTTP retry attempts")
    rate_limit_per_min: int = Field(100, description="Global inbound request ceiling per minute")
    rate_limit_capacity: int = Field(100, description="Global inbound burst capacity")

    # === Application ===
    environment: str = Field("production", description="development | production")
    log_level: str = Field("INFO", description="Root log level")
    log_file: str | None = Field(None, description="Path to JSON log file (None disables)")

    @property
    def is_development(self) -> bool:
        """Return True when running in development mode."""
        return self.environment.lower() == "development"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Raises:
        RuntimeError: If required environment variables are missing.

    """
    try:
        return Settings()
    except ValidationError as e:
        missing_fields = []
        for error in e.errors():
            if error["type"] == "missing":
                field_name = error["loc"][0]
                missing_fields.append(str(field_name).upper())

        error_msg = (
            f"Configuration error: Missing required environment variables: "
            f"{', '.join(missing_fields)}\n"
            f"Please set them in .env file or export as environment variables.\n"
            f"See .env.example for reference."
        )
        raise RuntimeError(error_msg) from e


__all__ = ["Settings", "get_settings"]
