"""
Postbridge - Configuration and settings.

Settings only feed the application layer (CLI, get_client()).
The query core never reads them: base URL and auth headers are injected.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Connection settings for the PostgREST data API.

    Values come from the environment or a .env file in the working directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # PostgREST
    postgrest_url: str = "http://localhost:3000"
    postgrest_api_key: str | None = None
    postgrest_timeout: float | None = None  # None = wait forever

    # Application
    postbridge_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    @property
    def is_development(self) -> bool:
        return self.postbridge_env == "development"

    @property
    def is_production(self) -> bool:
        return self.postbridge_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: Settings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()
