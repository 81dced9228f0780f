"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret shared with the auth provider to verify JWT tokens",
        min_length=1,
    )
    access_token_expire_minutes: int = Field(
        default=60,
        description="Lifetime of tokens minted by create_access_token",
        gt=0,
    )
    app_timezone: str = Field(
        default="Asia/Tokyo",
        description="IANA timezone (or UTC+HH:MM offset) used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to call the API from a browser",
    )
    realtime_enabled: bool = Field(
        default=True,
        description="Use the websocket delivery channel; disabled means no realtime push",
    )
    realtime_push_timeout_seconds: float = Field(
        default=2.0,
        description="Upper bound for a single realtime push",
        gt=0,
    )
    ws_idle_timeout_seconds: float = Field(
        default=60.0,
        description="Close websocket connections that stay silent for this long",
        gt=0,
    )
    unread_source_timeout_seconds: float = Field(
        default=3.0,
        description="Per-source timeout used when aggregating unread counters",
        gt=0,
    )
    notification_retention_days: int = Field(
        default=90,
        description="Notifications older than this are purged; 0 keeps them forever",
        ge=0,
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError(f"Unsupported LOG_LEVEL '{value}'")
        return level


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
