"""
Environment variable loading for the dev reputation service.

- Loads .env from project root when present.
- Small typed readers used by settings.py; invalid values raise ConfigError.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

from backend_devscore.core.exceptions import ConfigError

# Project root: config is backend_devscore/config/, root is 2 levels up
_CONFIG_DIR = Path(__file__).resolve().parent
_BACKEND_DIR = _CONFIG_DIR.parent
_ROOT = _BACKEND_DIR.parent
_ENV_PATH = _ROOT / ".env"

DEFAULT_SQLITE_PATH = "devscore.db"


def load_devscore_env() -> None:
    """Load .env from project root. Existing env vars win. Safe to call multiple times."""
    load_dotenv(_ENV_PATH, override=False)


def env_str(name: str, default: str | None = None) -> str | None:
    raw = (os.getenv(name) or "").strip()
    return raw or default


def env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def env_bool(name: str, default: bool) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def get_database_url() -> str:
    """
    Resolve the SQLAlchemy URL.
    Order: DATABASE_URL > DEVSCORE_DB_PATH (SQLite file) > devscore.db in cwd.
    """
    url = env_str("DATABASE_URL")
    if url:
        return url
    path = env_str("DEVSCORE_DB_PATH", DEFAULT_SQLITE_PATH)
    return f"sqlite:///{path}"
