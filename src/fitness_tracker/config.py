"""Application configuration."""

import os
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    api_token: str
    store_backend: Literal["memory", "supabase"] = "supabase"
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    documents_table: str = "documents"
    poll_interval_seconds: float = 2.0
    transaction_attempts: int = 5
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    def supabase_credentials(self) -> tuple[str, str]:
        """Return the Supabase URL and key, failing fast when either is missing."""
        if not self.supabase_url or not self.supabase_service_key:
            raise ValueError(
                "SUPABASE_URL and SUPABASE_SERVICE_KEY are required "
                "when STORE_BACKEND=supabase"
            )
        return self.supabase_url, self.supabase_service_key
