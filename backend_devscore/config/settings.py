"""
Application settings.

Read once from environment variables (and .env) into a frozen dataclass.
get_settings() is cached; tests call reset_settings_cache() after monkeypatching env.
"""

from __future__ import annotations

import functools
from dataclasses import dataclass

from backend_devscore.config.env import (
    env_bool,
    env_int,
    env_str,
    get_database_url,
    load_devscore_env,
)


@dataclass(frozen=True)
class Settings:
    database_url: str
    api_host: str = "0.0.0.0"
    api_port: int = 8000
    admin_api_key: str | None = None
    refresh_interval_sec: int = 300
    """Seconds between scheduled refresh ticks."""
    stale_after_sec: int = 300
    """A dev is refreshed when its updated_at is older than this."""
    refresh_batch_limit: int = 50
    scheduler_enabled: bool = True
    log_level: str = "INFO"
    log_format: str = "json"


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the current application settings (cached)."""
    load_devscore_env()
    return Settings(
        database_url=get_database_url(),
        api_host=env_str("API_HOST", "0.0.0.0"),
        api_port=env_int("API_PORT", 8000),
        admin_api_key=env_str("ADMIN_API_KEY"),
        refresh_interval_sec=env_int("SCORE_REFRESH_INTERVAL_SEC", 300),
        stale_after_sec=env_int("SCORE_STALE_AFTER_SEC", 300),
        refresh_batch_limit=env_int("SCORE_REFRESH_BATCH_LIMIT", 50),
        scheduler_enabled=env_bool("SCORE_SCHEDULER_ENABLED", True),
        log_level=(env_str("LOG_LEVEL", "INFO") or "INFO").upper(),
        log_format=(env_str("LOG_FORMAT", "json") or "json").lower(),
    )


def reset_settings_cache() -> None:
    get_settings.cache_clear()
