"""
Database engine and session management for the catalog.

A single DatabaseManager owns the engine for the process. The web app
initializes it at startup, the CLI on demand and tests against in-memory
SQLite.

Usage:
    from catalog.db import db, get_db

    db.initialize()
    with db.session() as session:
        PipeRepository(session).list_active(PipeFilters())
"""

import time
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any, Optional

from sqlalchemy import create_engine, event, text
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings, get_settings


class Base(DeclarativeBase):
    pass


def _engine_options(url: str, settings: Settings) -> dict[str, Any]:
    """
    Pool options per backend.

    In-memory SQLite must reuse one connection or every session would see an
    empty database. File SQLite and server databases get a regular pool.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() != "sqlite":
        return {
            "pool_size": settings.db_pool_size,
            "max_overflow": settings.db_max_overflow,
            "pool_pre_ping": settings.db_pool_pre_ping,
        }

    options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
    if parsed.database in (None, "", ":memory:"):
        options["poolclass"] = StaticPool
    return options


def _enable_sqlite_foreign_keys(engine: Engine) -> None:
    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class DatabaseManager:
    """
    Process-wide owner of the SQLAlchemy engine and session factory.

    initialize() is idempotent until reset() is called, which lets tests swap
    in a fresh in-memory database per test.
    """

    _instance: Optional["DatabaseManager"] = None

    def __new__(cls) -> "DatabaseManager":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.engine = None
            cls._instance.SessionLocal = None
        return cls._instance

    @property
    def is_initialized(self) -> bool:
        return self.engine is not None

    def initialize(self, database_url: str | None = None) -> None:
        if self.is_initialized:
            return

        settings = get_settings()
        url = database_url or settings.database_url

        engine = create_engine(url, echo=settings.debug, **_engine_options(url, settings))
        if engine.dialect.name == "sqlite":
            _enable_sqlite_foreign_keys(engine)

        self.engine = engine
        self.SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)

    def reset(self) -> None:
        """Dispose the engine so the next initialize() starts over."""
        if self.engine is not None:
            self.engine.dispose()
        self.engine = None
        self.SessionLocal = None

    def create_all_tables(self) -> None:
        self._require_engine()
        # Importing the models registers their tables on Base.metadata
        from . import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def drop_all_tables(self) -> None:
        self._require_engine()
        Base.metadata.drop_all(bind=self.engine)

    @contextmanager
    def session(self) -> Generator[Session, None, None]:
        """
        Session scope: commits when the block exits cleanly, rolls back and
        re-raises otherwise. Services may commit earlier themselves.
        """
        self._require_engine()
        session = self.SessionLocal()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def health_check(self) -> dict[str, Any]:
        """Run ``SELECT 1`` and report {healthy, latency_ms, error}."""
        if not self.is_initialized:
            return {"healthy": False, "latency_ms": 0, "error": "Database not initialized"}

        started = time.perf_counter()
        error = None
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
        except Exception as e:
            error = str(e)
        latency_ms = round((time.perf_counter() - started) * 1000, 2)
        return {"healthy": error is None, "latency_ms": latency_ms, "error": error}

    def _require_engine(self) -> None:
        if not self.is_initialized:
            raise RuntimeError("DatabaseManager not initialized. Call initialize() first.")


db = DatabaseManager()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency yielding one session per request."""
    with db.session() as session:
        yield session


__all__ = ["Base", "DatabaseManager", "db", "get_db"]
