"""Application configuration."""

import os

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    supabase_url: str
    supabase_service_key: str
    storage_bucket: str = "photos"
    admin_token: str
    bfl_api_key: str
    bfl_base_url: str = "https://api.bfl.ai/v1"
    bfl_model: str = "flux-kontext-pro"
    aspect_ratio: str = "4:3"
    poll_timeout_seconds: float = 60.0
    poll_interval_seconds: float = 1.0
    poll_backoff_seconds: float = 2.0
    invocation_timeout_seconds: float = 120.0
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @model_validator(mode="after")
    def _check_poll_budget(self) -> "Settings":
        if self.poll_timeout_seconds >= self.invocation_timeout_seconds:
            raise ValueError(
                "poll_timeout_seconds must be less than invocation_timeout_seconds"
            )
        return self


def parse_client_ip(forwarded_for: str | None, fallback: str | None) -> str:
    """Return the originating client address for rate-limit keys."""
    if forwarded_for:
        first = forwarded_for.split(",", maxsplit=1)[0].strip()
        if first:
            return first
    return fallback or "unknown"
