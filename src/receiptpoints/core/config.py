"""Application configuration using pydantic-settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application settings
    app_name: str = Field(default="receiptpoints", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    debug: bool = Field(default=False, description="Debug mode")

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format (text or json)")
    log_file: str | None = Field(
        default=None,
        description="Optional path of a rotating log file",
    )

    # Server
    host: str = Field(
        default="0.0.0.0",  # noqa: S104
        description="Interface to listen on",
    )
    port: int = Field(default=8080, ge=1, le=65535, description="Port to listen on")

    # Receipt handling
    reject_invalid_receipts: bool = Field(
        default=True,
        description=(
            "Reject receipts whose amounts, date or time do not parse. "
            "When disabled they are stored and the fields score as zero."
        ),
    )
    points_cache_size: int = Field(
        default=1024,
        ge=0,
        description="Number of scored receipts to memoize (0 disables caching)",
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
