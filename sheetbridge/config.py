"""
Configuration using Pydantic Settings.

Settings are loaded from environment variables prefixed with SHEETBRIDGE_
(or a .env file). Services receive a Settings instance explicitly; the
cached get_settings() is only the default for callers that do not pass one.
"""

import logging
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for the spreadsheet bridge."""

    model_config = SettingsConfigDict(
        env_prefix="SHEETBRIDGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Cell caching
    cache_method: str = "memory"
    cache_memory_limit_mb: int = 1
    cache_directory: str | None = None
    cache_memcache_host: str = "localhost"
    cache_memcache_port: int = 11211
    cache_ttl: int = 600
    cache_sqlite_database: str | None = None

    # Document properties
    default_creator: str = "SheetBridge"

    # Logging
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are loaded only once.
    """
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Configure root logging for the REST and MCP entry points."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format=settings.log_format,
    )
