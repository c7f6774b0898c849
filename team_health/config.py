"""Application configuration using Pydantic Settings."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore extra env vars that don't match field names
    )

    # Application
    app_name: str = "Team Health Analytics"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_prefix: str = "/api/v1"
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Slack export
    slack_export_source: Literal["filesystem", "http"] = "filesystem"
    slack_export_path: Path | None = Field(
        default=None,
        validation_alias=AliasChoices("slack_export_path", "export_path"),
    )
    slack_export_url: str = ""
    # Day files to fetch per channel name when reading over HTTP,
    # e.g. {"general": ["2025-06-26"]}
    slack_export_channel_dates: dict[str, list[str]] = Field(default_factory=dict)
    slack_export_http_timeout: float = 10.0

    # Analysis
    max_recommendations: int = Field(default=3, ge=1)
    top_users_limit: int = Field(default=5, ge=1)

    # Observability
    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
