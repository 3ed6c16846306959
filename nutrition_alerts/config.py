"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        default="sqlite:///./nutrition_alerts.db",
        description="SQLAlchemy URL of the database backing the local notification cache",
        min_length=1,
    )
    supabase_url: str | None = Field(
        default=None,
        description="Base URL of the Supabase project holding goals, meal plans and nutrition data",
    )
    supabase_key: str | None = Field(
        default=None,
        description="Supabase API key used for read-only queries",
    )
    supabase_jwt_secret: str | None = Field(
        default=None,
        description="Secret used by Supabase auth to sign user access tokens",
    )
    app_timezone: str = Field(
        default="UTC",
        description="Timezone that defines the user's 'today' and hour of day",
    )
    notification_refresh_minutes: int = Field(
        default=30,
        description="Minutes between two derivation passes for a signed-in user",
        gt=0,
    )
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Origins allowed to call the API from a browser",
    )

    @model_validator(mode="after")
    def _validate_supabase_pair(self) -> "Settings":
        if bool(self.supabase_url) ^ bool(self.supabase_key):
            raise ValueError(
                "SUPABASE_URL and SUPABASE_KEY must both be provided to query Supabase"
            )
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache and everything derived from it."""

    from nutrition_alerts.utils.datetime import get_app_timezone

    get_settings.cache_clear()
    get_app_timezone.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
