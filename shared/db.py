"""
Shared database connection and session management.

This module provides the sync SQLAlchemy engine and session setup used by
the API, the Alembic environment and the tests. The schema itself is
Alembic-managed; `shared.tables` mirrors it for query building.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from shared.config import get_config


# Global engine and session factory (initialized on first use).
_engine = None
_SessionLocal = None


def create_db_engine(database_url: str, **engine_kwargs: Any) -> Engine:
    """
    Create an engine for the given URL.

    For SQLite, pysqlite's own transaction handling is switched off so that
    SQLAlchemy controls BEGIN itself; without this SAVEPOINT (used by the
    press kit cascade delete) does not nest inside the request transaction.
    """
    engine_kwargs.setdefault("pool_pre_ping", True)
    engine = create_engine(database_url, **engine_kwargs)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _sqlite_connect(dbapi_connection, connection_record):
            dbapi_connection.isolation_level = None

        @event.listens_for(engine, "begin")
        def _sqlite_begin(conn):
            conn.exec_driver_sql("BEGIN")

    return engine


def get_engine() -> Engine:
    """Get or create the SQLAlchemy engine."""
    global _engine
    if _engine is None:
        config = get_config()
        if not config.database_url:
            raise ValueError(
                "DATABASE_URL environment variable is required. "
                "Set it to a PostgreSQL (or SQLite) connection string."
            )
        _engine = create_db_engine(config.database_url)
    return _engine


def get_session_factory() -> sessionmaker:
    """Get or create the session factory."""
    global _SessionLocal
    if _SessionLocal is None:
        _SessionLocal = sessionmaker(
            autocommit=False,
            autoflush=False,
            bind=get_engine(),
        )
    return _SessionLocal


@contextmanager
def session_scope(factory: sessionmaker) -> Generator[Session, None, None]:
    """Yield a session that commits on success and rolls back on any error."""
    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


@contextmanager
def get_db_session() -> Generator[Session, None, None]:
    """
    Context manager for database sessions.

    Usage:
        with get_db_session() as session:
            # Use session here
            pass
    """
    with session_scope(get_session_factory()) as session:
        yield session
