"""
Database session dependency for the API service.

Each request gets its own session: committed when the handler returns,
rolled back if it raises (including HTTPException), and always closed.
"""

from __future__ import annotations

from typing import Generator

from sqlalchemy.orm import Session

from shared.db import get_db_session as _get_db_session

__all__ = ["get_db_session"]


def get_db_session() -> Generator[Session, None, None]:
    """
    FastAPI dependency for database sessions.

    This is a generator function that FastAPI's Depends can use.
    FastAPI will handle the cleanup automatically.
    """
    with _get_db_session() as session:
        yield session
