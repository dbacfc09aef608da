"""Environment-based configuration using pydantic-settings.

Example:
    >>> from fallible.config import get_settings
    >>> get_settings().logging.level
    'WARNING'

    # Or with environment variables:
    # FALLIBLE_LOG_LEVEL=DEBUG
    # FALLIBLE_LOG_SUPPRESSED=true
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

LevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class LoggingSettings(BaseSettings):
    """Logging configuration for combinators."""

    model_config = SettingsConfigDict(
        env_prefix="FALLIBLE_LOG_",
        extra="ignore",
    )

    level: LevelName = "WARNING"
    suppressed: bool = Field(
        default=False,
        description="Log failures swallowed by optional/fallback_to/or_return/ignore at DEBUG",
    )
    include_trace: bool = Field(default=False, description="Attach tracebacks to failure records")

    @field_validator("level", mode="before")
    @classmethod
    def _upper(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v


class FallibleSettings(BaseSettings):
    """Root settings, loaded from FALLIBLE_* environment variables and .env."""

    model_config = SettingsConfigDict(
        env_prefix="FALLIBLE_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
        validate_default=True,
    )

    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> FallibleSettings:
    """Get the global settings instance (cached)."""
    return FallibleSettings()


def clear_settings_cache() -> None:
    """Clear the settings cache so the next get_settings() rereads the environment."""
    get_settings.cache_clear()


def configure_logging(level: LevelName | None = None) -> logging.Logger:
    """Attach a stream handler to the `fallible` logger.

    Uses the configured level unless one is given. Calling again only
    updates the level.
    """
    log = logging.getLogger("fallible")
    log.setLevel(level or get_settings().logging.level)
    if not any(getattr(h, "_fallible", False) for h in log.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handler._fallible = True  # type: ignore[attr-defined]
        log.addHandler(handler)
    return log
