"""
Configuration settings for the release-hosting client.

All settings are loaded from RELEASE_HOSTING_* environment variables with
sensible defaults. Use a .env file for local development.

There is no module-level settings instance: build a Settings
explicitly and hand it to ReleaseHostingClient.from_settings().
"""

from typing import Optional

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Client settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="RELEASE_HOSTING_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # === Hosting Service ===
    API_BASE_URL: str = "https://api.releases.example.com"
    SOURCE_HOST: str = "github"
    OWNER: str = ""  # required by from_settings(); empty is rejected
    TOKEN: Optional[SecretStr] = None  # Bearer credential; None = unauthenticated client

    # === HTTP ===
    REQUEST_TIMEOUT: float = 10.0  # seconds, per HTTP request
    MAX_CONNECTIONS: int = 10
    PAGE_SIZE: Optional[int] = None  # None = server default

    # === Retry & Backoff ===
    MAX_ATTEMPTS: int = 4
    BACKOFF_BASE: float = 0.5  # seconds before the second attempt
    BACKOFF_MULTIPLIER: float = 2.0
    BACKOFF_MAX: float = 30.0
    JITTER: float = 0.0  # 0.25 = +/-25% jitter
    JITTER_SEED: int = 0

    # === Resolution ===
    ALLOW_TARGET_FALLBACK: bool = False

    # === Logging ===
    LOG_LEVEL: str = "INFO"
    ENVIRONMENT: str = "development"
