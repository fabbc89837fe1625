"""
Storage handle for the dev reputation service.

The scorer, worker, and API only need three operations: run a parameterized
query returning rows (all), a single row (first), and a mutation (run).
StorageHandle is that interface; SQLAlchemyStorage implements it over any
SQLAlchemy URL (SQLite by default, PostgreSQL via DATABASE_URL).

SQL uses named bind parameters (:dev_id). Rows come back as plain dicts.
Each call runs in its own session: commit on success, rollback and re-raise
on error. There is no cross-statement transaction.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Iterator, Mapping, Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from backend_devscore.database.models import Base
from backend_devscore.devscore_logging import get_logger

logger = get_logger(__name__)

Params = Optional[Mapping[str, Any]]


class StorageHandle(ABC):
    """Abstract interface for persistence; implement for another driver if needed."""

    @abstractmethod
    def all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        """Run a query and return zero or more rows."""
        ...

    @abstractmethod
    def first(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        """Run a query and return the first row, or None."""
        ...

    @abstractmethod
    def run(self, sql: str, params: Params = None) -> int:
        """Run a mutation. Returns affected row count."""
        ...


class SQLAlchemyStorage(StorageHandle):
    """StorageHandle backed by a SQLAlchemy engine."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self._url = url
        connect_args: dict[str, Any] = {}
        if url.startswith("sqlite"):
            connect_args["check_same_thread"] = False
        self._engine: Engine = create_engine(
            url, connect_args=connect_args, pool_pre_ping=True, echo=echo
        )
        self._session_factory = sessionmaker(autocommit=False, autoflush=False, bind=self._engine)
        logger.info("storage_engine_created", url=url.split("?")[0].split("//")[-1])

    @property
    def engine(self) -> Engine:
        return self._engine

    @contextmanager
    def _session_scope(self) -> Iterator[Session]:
        session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def ensure_schema(self) -> None:
        """Create devs and tokens tables if they do not exist."""
        Base.metadata.create_all(self._engine)

    def all(self, sql: str, params: Params = None) -> list[dict[str, Any]]:
        with self._session_scope() as session:
            result = session.execute(text(sql), dict(params or {}))
            return [dict(row) for row in result.mappings().all()]

    def first(self, sql: str, params: Params = None) -> dict[str, Any] | None:
        with self._session_scope() as session:
            row = session.execute(text(sql), dict(params or {})).mappings().first()
            return dict(row) if row is not None else None

    def run(self, sql: str, params: Params = None) -> int:
        with self._session_scope() as session:
            result = session.execute(text(sql), dict(params or {}))
            return result.rowcount or 0

    def dispose(self) -> None:
        self._engine.dispose()


def get_storage(url: str | None = None) -> SQLAlchemyStorage:
    """
    Return a SQLAlchemyStorage with the schema in place.

    url: SQLAlchemy URL; defaults to settings.database_url (DATABASE_URL or DEVSCORE_DB_PATH).
    """
    if url is None:
        from backend_devscore.config import get_settings

        url = get_settings().database_url
    storage = SQLAlchemyStorage(url)
    storage.ensure_schema()
    return storage
