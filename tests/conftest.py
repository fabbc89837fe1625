"""
Pytest fixtures for DevScore tests. Uses a temporary SQLite DB per test.
"""

from __future__ import annotations

import time

import pytest
from sqlalchemy.orm import Session

from backend_devscore.config import Settings, reset_settings_cache
from backend_devscore.database import Dev, SQLAlchemyStorage, Token

ADMIN_KEY = "test-admin-key"


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch):
    """Keep host env vars out of settings and drop the settings cache around each test."""
    for name in (
        "DATABASE_URL",
        "DEVSCORE_DB_PATH",
        "ADMIN_API_KEY",
        "API_PORT",
        "SCORE_REFRESH_INTERVAL_SEC",
        "SCORE_STALE_AFTER_SEC",
        "SCORE_REFRESH_BATCH_LIMIT",
        "SCORE_SCHEDULER_ENABLED",
        "LOG_FORMAT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    reset_settings_cache()
    yield
    reset_settings_cache()


@pytest.fixture
def db_url(tmp_path) -> str:
    return f"sqlite:///{tmp_path / 'devscore.db'}"


@pytest.fixture
def storage(db_url):
    """Fresh SQLAlchemyStorage with devs/tokens tables."""
    s = SQLAlchemyStorage(db_url)
    s.ensure_schema()
    yield s
    s.dispose()


@pytest.fixture
def now() -> int:
    return int(time.time())


@pytest.fixture
def add_dev(storage):
    """Insert a devs row. Returns the dev id."""

    def _add(dev_id: str, address: str | None = None, **fields) -> str:
        with Session(storage.engine) as session:
            session.add(Dev(id=dev_id, wallet_address=address or f"wallet-{dev_id}", **fields))
            session.commit()
        return dev_id

    return _add


@pytest.fixture
def add_token(storage, now):
    """Insert a tokens row for a dev. created_at defaults to now (Unix seconds)."""
    counter = {"n": 0}

    def _add(dev_id: str, **fields) -> None:
        counter["n"] += 1
        fields.setdefault("contract_address", f"token-{dev_id}-{counter['n']}")
        fields.setdefault("created_at", now)
        with Session(storage.engine) as session:
            session.add(Token(creator_dev_id=dev_id, **fields))
            session.commit()

    return _add


@pytest.fixture
def api_settings(db_url) -> Settings:
    return Settings(database_url=db_url, admin_api_key=ADMIN_KEY, scheduler_enabled=False)


@pytest.fixture
def client(storage, api_settings):
    """FastAPI TestClient bound to the temp storage; scheduler off."""
    from fastapi.testclient import TestClient

    from backend_devscore.api_server.server import create_app

    app = create_app(storage=storage, settings=api_settings)
    with TestClient(app) as c:
        yield c
