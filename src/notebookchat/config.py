# Application settings.
# Created: 2026-10-02
#
# Environment variable names match the deployment docs (GOOGLE_CLOUD_CLIENT_ID,
# GEMINI_API_KEY, ...). Components receive a Settings instance at construction;
# only the API layer calls get_settings().

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # ── Google OAuth client ───────────────────────────────────────────────────
    google_cloud_client_id: str | None = None
    google_cloud_client_secret: str | None = None
    # Defaults to {request origin}/api/v1/auth/callback when unset
    google_cloud_redirect_uri: str | None = None

    # ── Fallback credentials (CredentialBroker) ───────────────────────────────
    google_cloud_access_token: str | None = None  # operator override
    google_application_credentials: str | None = None  # service account key file
    google_service_account_json: str | None = None  # inline service account JSON

    # ── Notebook service ──────────────────────────────────────────────────────
    google_cloud_project_number: str | None = None
    notebook_location: str = "global"
    notebook_endpoint_location: str = "us"
    upstream_timeout: float = 15.0

    # ── Completion ────────────────────────────────────────────────────────────
    # "auto" = gemini if GEMINI_API_KEY is set, else anthropic if its key is set
    llm_provider: str = "auto"
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"
    anthropic_api_key: str | None = None
    anthropic_model: str = "claude-sonnet-4-5"
    history_limit: int = 10

    # ── App ───────────────────────────────────────────────────────────────────
    environment: str = "development"
    cors_origins: list[str] = ["http://localhost:3000"]
    log_level: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def oauth_configured(self) -> bool:
        return bool(self.google_cloud_client_id and self.google_cloud_client_secret)


@lru_cache
def get_settings() -> Settings:
    return Settings()
