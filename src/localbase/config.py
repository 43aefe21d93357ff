"""
Localbase - Configuration and settings.

Loaded from environment / .env; only the desktop database location and
logging are configurable. Table metadata is compiled in (localbase.schema).
"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class LocalbaseSettings(BaseSettings):
    """Desktop-mode settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # SQLite file (":memory:" for a throwaway database)
    localbase_db_path: Path = Path("data/localbase.db")

    # Application
    localbase_env: Literal["development", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


@lru_cache
def get_settings() -> LocalbaseSettings:
    """Get cached settings instance."""
    return LocalbaseSettings()


class _SettingsProxy:
    """Lazy proxy for settings to avoid loading .env at import time."""

    _instance: LocalbaseSettings | None = None

    def __getattr__(self, name: str):
        if self._instance is None:
            self._instance = get_settings()
        return getattr(self._instance, name)


settings = _SettingsProxy()


def configure_logging(level: str | None = None) -> None:
    """Apply log_level to the root logger (compiled SQL is logged at DEBUG)."""
    logging.basicConfig(
        level=level or get_settings().log_level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
