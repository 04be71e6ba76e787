"""Client configuration via Pydantic BaseSettings."""

from __future__ import annotations

from enum import Enum
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    development = "development"
    staging = "staging"
    production = "production"


class Settings(BaseSettings):
    """Settings loaded from environment variables and .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # ActiveCampaign account
    ACTIVECAMPAIGN_URL: str = ""  # e.g. https://<account>.api-us1.com
    ACTIVECAMPAIGN_API_TOKEN: str = ""
    ACTIVECAMPAIGN_TIMEOUT: float = 30.0  # seconds, applied by the default transport

    # Max field value / tag writes in flight per sync (1 = strictly sequential)
    SYNC_CONCURRENCY: int = 1

    # Environment
    ENVIRONMENT: Environment = Environment.development

    # Logging
    LOG_LEVEL: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    """Singleton settings instance."""
    return Settings()
