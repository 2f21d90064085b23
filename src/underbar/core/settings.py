"""Library settings for underbar.

Settings are read from ``UNDERBAR_``-prefixed environment variables and an
optional ``.env`` file. They only cover ambient concerns: how logs are
rendered, which host timer facility backs ``delay``/``throttle`` by default,
and an optional seed that makes ``shuffle`` reproducible.

Features:
    - **UnderbarSettings:** log_level, json_logs, timer_backend, shuffle_seed
    - **env_prefix:** ``UNDERBAR_LOG_LEVEL=DEBUG`` etc.
    - **.env file support:** Automatic loading via pydantic-settings
    - **Extra ignore:** Unknown env vars don't cause import failures

Examples:
    >>> from underbar.core.settings import get_settings
    >>> get_settings().timer_backend
    'thread'

Tags:
    settings, configuration, pydantic, environment, underbar
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class UnderbarSettings(BaseSettings):
    """Settings shared by every underbar module.

    Fields
    ──────
    log_level     : Structlog log level
    json_logs     : JSON renderer on/off (``None`` → JSON when stdout is not a TTY)
    timer_backend : Default host timer facility for delay/throttle
    shuffle_seed  : Seed for the default shuffle RNG (``None`` → OS entropy)
    """

    model_config = SettingsConfigDict(
        env_prefix="UNDERBAR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    json_logs: bool | None = None

    # ── Execution ────────────────────────────────────────────────
    timer_backend: Literal["thread", "asyncio"] = "thread"

    # ── Randomness ───────────────────────────────────────────────
    shuffle_seed: int | None = Field(
        default=None,
        description="Seed for the process-wide shuffle generator",
    )

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"unknown log level: {value!r}")
        return level


@lru_cache(maxsize=1)
def get_settings() -> UnderbarSettings:
    """Return the process-wide settings, loading them on first use."""
    return UnderbarSettings()


def reset_settings() -> None:
    """Drop the cached settings so the next access re-reads the environment."""
    get_settings.cache_clear()


__all__ = ["UnderbarSettings", "get_settings", "reset_settings"]
