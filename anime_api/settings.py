"""
Centralized application settings using Pydantic Settings.

This module provides type-safe, validated configuration loaded from environment
variables. All settings are validated at application startup, ensuring early
failure if configuration is invalid.

Usage:
    from anime_api.settings import settings

    # Access settings as typed attributes
    base_url = settings.anify_base_url
    ttl = settings.cache_ttl_seconds

Environment Variables:
    Optional:
        - ANIFY_BASE_URL: Primary episode provider and image source
        - METADATA_BASE_URL: Internal metadata/info service base URL
        - CONSUMET_API: Fallback episode provider base URL
        - REDIS_URL: Redis connection string (in-memory cache when unset)
        - CACHE_TTL_SECONDS: Lifetime of aggregated episode data (default: 18000)
        - IMAGE_TIMEOUT_SECONDS: Timeout for the episode image fetch (default: 2)
        - HTTP_TIMEOUT_SECONDS: Timeout for other outbound requests (default: 30)
        - EPISODES_RATE_LIMIT: Rate limit for the episodes route (default: 60/minute)
        - ALLOWED_ORIGINS: Comma-separated or JSON list of CORS origins
        - LOG_LEVEL: Logging level (default: INFO)
"""
from __future__ import annotations

import json
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from anime_api.config import DEFAULT_CACHE_TTL_SECONDS


class Settings(BaseSettings):
    """Application settings with validation and type coercion."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars not defined here
    )

    # =========================================================================
    # Upstream Providers
    # =========================================================================
    anify_base_url: str = Field(
        default="https://api.anify.tv",
        description="Base URL of the primary episode provider and episode image source"
    )
    metadata_base_url: str = Field(
        default="http://localhost:3000",
        description="Base URL serving /api/v1/episodesMetadata/{id} and /api/v1/info/{id}"
    )
    consumet_api: str = Field(
        default="http://localhost:3001",
        description="Base URL of the fallback episode provider"
    )

    # =========================================================================
    # Outbound HTTP
    # =========================================================================
    image_timeout_seconds: float = Field(
        default=2.0,
        gt=0,
        description="Timeout for the episode image request"
    )
    http_timeout_seconds: float = Field(
        default=30.0,
        gt=0,
        description="Timeout for every other outbound request"
    )

    # =========================================================================
    # Cache
    # =========================================================================
    redis_url: str | None = Field(
        default=None,
        description="Redis connection string (e.g., redis://localhost:6379/0)"
    )
    cache_ttl_seconds: int = Field(
        default=DEFAULT_CACHE_TTL_SECONDS,
        ge=1,
        description="How long aggregated episode data stays cached"
    )

    # =========================================================================
    # Rate Limiting & CORS
    # =========================================================================
    episodes_rate_limit: str = Field(
        default="60/minute",
        description="slowapi limit string applied to the episodes route"
    )
    allowed_origins: str = Field(
        default="http://localhost:8080,http://localhost:3000",
        description="Comma-separated or JSON list of allowed CORS origins"
    )

    # =========================================================================
    # Logging
    # =========================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # =========================================================================
    # Validators
    # =========================================================================
    @field_validator("anify_base_url", "metadata_base_url", "consumet_api")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs so paths can be appended with a single slash."""
        return v.rstrip("/")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}")
        return upper

    # =========================================================================
    # Computed Properties
    # =========================================================================
    def get_allowed_origins(self) -> list[str]:
        """Parse origins from JSON array or comma-separated string."""
        v = self.allowed_origins.strip()
        if v.startswith("["):
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return [str(origin).strip() for origin in parsed if origin]
            except json.JSONDecodeError:
                pass
        return [origin.strip() for origin in v.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    This also validates all settings at first access.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings are invalid.
    """
    return Settings()


# Convenience singleton for direct imports
settings = get_settings()
