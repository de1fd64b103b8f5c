"""Application configuration."""

import os

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")

DEMO_CLIENT_ID = "demo_client_id"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    admin_token: str
    google_client_id: str | None = None
    google_client_secret: str | None = None
    google_redirect_uri: str | None = None
    google_picker_base_url: str = "https://photospicker.googleapis.com/v1"
    picker_poll_interval_ms: int = 2000
    picker_timeout_ms: int = 120000
    fixture_finalize_after_polls: int | None = 3
    default_user_id: str = "default-user"
    log_level: str = "INFO"
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )


def is_google_oauth_configured(settings: Settings) -> bool:
    """Return true when real Google OAuth credentials are configured."""
    return bool(
        settings.google_client_id
        and settings.google_client_secret
        and settings.google_client_id != DEMO_CLIENT_ID
    )
