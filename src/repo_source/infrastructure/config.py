"""Application configuration — loaded from environment variables."""

from __future__ import annotations

from functools import lru_cache

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Central configuration loaded from env vars (or ``.env`` file)."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    github_token: SecretStr | None = None
    github_api_url: str = "https://api.github.com"
    request_timeout_seconds: float = 30.0
    cache_enabled: bool = True
    cache_ttl_seconds: float = 60.0
    cache_max_entries: int = 512
    retry_max_tries: int = 3
    retry_max_time_seconds: float = 30.0
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000

    @property
    def token(self) -> str | None:
        return self.github_token.get_secret_value() if self.github_token else None


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the singleton application settings (cached after first call)."""
    return Settings()
