"""
Configuration management for the customer management service
"""


import threading
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..utilities.constants import ApiSettings, CacheSettings


class Settings(BaseSettings):
    """Application settings, read from the environment and .env"""

    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Database configuration
    database_url: str = Field("sqlite:///data/customers.db")

    # Application settings
    log_level: str = Field("INFO")
    environment: str = Field("development")
    log_dir: str = Field("logs")

    # Remote customer service
    customer_api_base_url: str = Field("http://localhost:5000/api/")
    auth_base_url: str = Field("http://localhost:5000/")
    request_timeout_seconds: float = Field(ApiSettings.DEFAULT_TIMEOUT_SECONDS, gt=0)
    token_refresh_skew_seconds: int = Field(ApiSettings.TOKEN_REFRESH_SKEW_SECONDS, ge=0)

    # Cache
    cache_backend: Literal["memory", "redis"] = Field("memory")
    redis_url: str = Field("redis://localhost:6379/0")
    cache_default_ttl_seconds: int = Field(CacheSettings.DEFAULT_TTL_SECONDS, gt=0)
    customer_cache_ttl_seconds: int = Field(CacheSettings.CUSTOMER_TTL_SECONDS, gt=0)
    listing_cache_ttl_seconds: int = Field(CacheSettings.LISTING_TTL_SECONDS, gt=0)
    cache_operation_timeout_seconds: float = Field(
        CacheSettings.OPERATION_TIMEOUT_SECONDS, gt=0
    )

    @field_validator("customer_api_base_url", "auth_base_url")
    @classmethod
    def _ensure_trailing_slash(cls, value: str) -> str:
        # Relative routes are joined onto these URLs
        return value if value.endswith("/") else value + "/"

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        return value.upper()

    @property
    def is_production(self) -> bool:
        return self.environment.lower() == "production"


_settings_instance: Settings | None = None
_settings_lock = threading.Lock()


def get_config() -> Settings:
    """Get the global settings instance, ensuring thread safety."""
    global _settings_instance
    if _settings_instance is None:
        with _settings_lock:
            if _settings_instance is None:
                _settings_instance = Settings()
    return _settings_instance


def reset_config() -> None:
    """Drop the cached settings so the next get_config() reloads them"""
    global _settings_instance
    with _settings_lock:
        _settings_instance = None
