"""
Application configuration.

Loads settings from environment variables with sensible defaults.
A Settings instance is built once at startup and handed to the app
factory; nothing below the entry point reads the environment itself.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    # ==========================================================================
    # Environment
    # ==========================================================================

    environment: str = "development"
    debug: bool = True

    # ==========================================================================
    # API Server
    # ==========================================================================

    api_host: str = "0.0.0.0"
    api_port: int = 4444

    # Frontend origin: used for CORS and for links in outgoing emails
    frontend_url: str = "http://localhost:7777"

    # ==========================================================================
    # Authentication
    # ==========================================================================

    app_secret: str = "dev-app-secret-change-in-production"
    jwt_algorithm: str = "HS256"

    session_cookie_name: str = "token"
    session_max_age_days: int = 365
    session_cookie_secure: bool = False
    session_cookie_samesite: str = "lax"

    password_hash_rounds: int = 10

    reset_token_ttl_minutes: int = 60
    # False keeps the historical lookup (expiry >= now - ttl); True checks expiry >= now
    strict_reset_expiry: bool = False

    # ==========================================================================
    # Email (AWS SES)
    # ==========================================================================

    aws_region: str = "us-east-1"
    aws_access_key_id: str = ""
    aws_secret_access_key: str = ""
    mail_from: str = ""

    # ==========================================================================
    # Optional Services
    # ==========================================================================

    sentry_dsn: str = ""

    # ==========================================================================
    # Helpers
    # ==========================================================================

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def use_aws(self) -> bool:
        """Whether AWS services should be used."""
        return bool(self.aws_access_key_id and self.aws_secret_access_key)

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_max_age_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance (entry points only)."""
    return Settings()
