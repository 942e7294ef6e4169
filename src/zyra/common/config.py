"""Zyra configuration via pydantic-settings."""

import warnings
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

_INSECURE_DEFAULTS = {
    "secret_key": "insecure-dev-key-change-me",
}

STORAGE_BACKENDS = ("sql", "memory")


class ZyraSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="ZYRA_")

    environment: str = "development"
    secret_key: str = "insecure-dev-key-change-me"
    log_level: str = "INFO"

    # Storage: "sql" uses db_url, "memory" keeps everything in-process
    storage_backend: str = "sql"
    db_url: str = "sqlite+aiosqlite:///./data/zyra.db"

    # API
    api_title: str = "Zyra"
    api_version: str = "0.1.0"
    api_prefix: str = "/api"
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:3000", "http://localhost:5173"]
    session_max_age: int = 24 * 3600  # seconds

    # AI provider (OpenAI-compatible)
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_model: str = "gpt-5"

    # Billing provider
    stripe_secret_key: str = ""
    stripe_price_id: str = ""

    # Dashboard feed limits
    activity_log_limit: int = 50
    metrics_limit: int = 20
    dashboard_activity_count: int = 10
    metrics_window_hours: int = 24

    trial_days: int = 7

    @property
    def billing_enabled(self) -> bool:
        return bool(self.stripe_secret_key)

    def validate_for_production(self) -> None:
        """Fail fast on unusable or insecure configuration."""
        if self.storage_backend not in STORAGE_BACKENDS:
            raise RuntimeError(
                f"ZYRA_STORAGE_BACKEND must be one of {', '.join(STORAGE_BACKENDS)}, "
                f"got: {self.storage_backend!r}"
            )
        if self.storage_backend == "sql" and not self.db_url:
            raise RuntimeError(
                "ZYRA_DB_URL is required when ZYRA_STORAGE_BACKEND is 'sql'"
            )

        insecure_fields = [
            field
            for field, default in _INSECURE_DEFAULTS.items()
            if getattr(self, field) == default
        ]

        if self.environment != "development" and insecure_fields:
            env_vars = ", ".join(f"ZYRA_{f.upper()}" for f in insecure_fields)
            raise RuntimeError(
                f"Insecure default values detected in '{self.environment}' environment. "
                f"Set these environment variables to secure values: {env_vars}. "
                "Generate secrets with: python -c \"import secrets; print(secrets.token_urlsafe(48))\""
            )

        if insecure_fields:
            warnings.warn(
                "Using insecure default session key; set ZYRA_SECRET_KEY for production",
                UserWarning,
                stacklevel=2,
            )


@lru_cache
def get_settings() -> ZyraSettings:
    settings = ZyraSettings()
    settings.validate_for_production()
    return settings
