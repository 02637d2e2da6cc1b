"""Configuration management for the port registry."""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from port_registry.loader import DEFAULT_CACHE_PATH, REGISTRY_URL, REQUEST_TIMEOUT_SECONDS

MIN_REFRESH_INTERVAL_SECONDS = 60


class PortRegistryConfig(BaseSettings):
    """Configuration loaded from environment variables or a .env file."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    registry_url: str = REGISTRY_URL
    cache_path: str = DEFAULT_CACHE_PATH
    request_timeout: float = Field(default=REQUEST_TIMEOUT_SECONDS, gt=0)
    force_download: bool = False
    refresh_interval: int = Field(default=0, ge=0)  # seconds, 0 disables periodic refresh
    draw_count: int = Field(default=1, ge=1)
    log_level: str = "INFO"

    @field_validator("refresh_interval")
    @classmethod
    def _clamp_refresh_interval(cls, value: int) -> int:
        if 0 < value < MIN_REFRESH_INTERVAL_SECONDS:
            return MIN_REFRESH_INTERVAL_SECONDS
        return value


def load_config() -> PortRegistryConfig:
    """Load configuration from environment variables."""
    return PortRegistryConfig()
