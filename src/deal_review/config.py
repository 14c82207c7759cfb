"""Application configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict

PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"


class Environment(str, Enum):
    development = "development"
    production = "production"


class Settings(BaseSettings):
    """Application settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"

    # Google OAuth
    GOOGLE_CLIENT_ID: str = ""
    GOOGLE_CLIENT_SECRET: str = ""
    CALLBACK_URL: str = "http://localhost:3001/api/auth/google/callback"

    # HubSpot CRM
    HUBSPOT_API_KEY: str = ""
    HUBSPOT_BASE_URL: str = "https://api.hubapi.com"
    HUBSPOT_TIMEOUT: float = 30.0
    USE_DUMMY_DATA: bool = False
    WORKFLOW_TAG: str = "Next-meeting"

    # Web client (CORS origin and post-login redirect target)
    FRONTEND_URL: str = "http://localhost:5173"

    # Signing secrets
    SESSION_SECRET: str = "fallback-session-secret"  # OAuth state cookie
    JWT_SECRET: str = "fallback-jwt-secret"  # session credential
    JWT_ALGORITHM: str = "HS256"
    SESSION_TTL_DAYS: int = 7

    # Monitoring
    SENTRY_DSN: str = ""

    @property
    def use_sample_data(self) -> bool:
        """True when no usable HubSpot key is configured or sample mode is forced."""
        if self.USE_DUMMY_DATA:
            return True
        return not self.HUBSPOT_API_KEY or self.HUBSPOT_API_KEY == PLACEHOLDER_API_KEY

    @property
    def secure_cookies(self) -> bool:
        return self.ENVIRONMENT == Environment.production


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
