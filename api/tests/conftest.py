"""
Pytest configuration and fixtures for API tests.

This module provides shared test fixtures including database setup,
the FastAPI test client and helpers for registering musicians.

Tests run against a private in-memory SQLite database by default; set
TEST_DATABASE_URL to run them against PostgreSQL instead.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Callable, Generator

# Must be set before the app reads its configuration.
os.environ.setdefault("APP_ENV", "local")
os.environ.setdefault("JWT_SECRET", "test-secret-key-with-enough-length-for-hs256")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOG_LEVEL", "WARNING")

import pytest
from alembic import command
from alembic.config import Config
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from api.db import get_db_session
from api.main import create_app
from shared.db import create_db_engine, session_scope
from shared.tables import metadata

TEST_DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite://")


def run_migrations(engine: Engine) -> None:
    """
    Run Alembic migrations against the test database.

    This ensures the database schema is up to date before tests run.
    """
    # This file is at api/tests/conftest.py, so go up two levels
    repo_root = Path(__file__).parent.parent.parent

    alembic_cfg = Config()
    alembic_cfg.set_main_option("script_location", str(repo_root / "migrations"))

    with engine.begin() as connection:
        alembic_cfg.attributes["connection"] = connection
        command.upgrade(alembic_cfg, "head")


@pytest.fixture(scope="function")
def test_engine() -> Generator[Engine, None, None]:
    """
    Create a migrated database engine for one test.

    In-memory SQLite lives as long as its single connection, so StaticPool
    keeps every session (including the ones TestClient opens from worker
    threads) on that connection.
    """
    if TEST_DATABASE_URL.startswith("sqlite"):
        engine = create_db_engine(
            TEST_DATABASE_URL,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    else:
        engine = create_db_engine(TEST_DATABASE_URL)

    run_migrations(engine)
    yield engine

    if not TEST_DATABASE_URL.startswith("sqlite"):
        with engine.begin() as connection:
            for table in reversed(metadata.sorted_tables):
                connection.execute(table.delete())
            connection.exec_driver_sql("DELETE FROM alembic_version")
    engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


@pytest.fixture
def client(session_factory) -> Generator[TestClient, None, None]:
    """Create a FastAPI test client whose requests each get a committed session."""
    app = create_app()

    # Override the database dependency
    def override_get_db():
        with session_scope(session_factory) as session:
            yield session

    app.dependency_overrides[get_db_session] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    # Clean up
    app.dependency_overrides.clear()


@pytest.fixture
def db_session(session_factory) -> Generator[Session, None, None]:
    """Provide a database session for direct repository and service testing."""
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def register(client) -> Callable[..., dict]:
    """
    Register a user and return {"token", "headers", "user", "musician_id"}.

    Each call uses a fresh email unless one is given.
    """
    counter = {"n": 0}

    def _register(
        email: str | None = None,
        password: str = "secret123",
        name: str = "Test Band",
    ) -> dict:
        counter["n"] += 1
        email = email or f"musician{counter['n']}@example.com"
        response = client.post(
            "/auth/register",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201, response.text
        data = response.json()
        return {
            "token": data["token"],
            "headers": {"Authorization": f"Bearer {data['token']}"},
            "user": data["user"],
            "musician_id": data["user"]["musician"]["id"],
        }

    return _register


@pytest.fixture
def musician(register) -> dict:
    return register()


@pytest.fixture
def other_musician(register) -> dict:
    return register(name="Someone Else")


@pytest.fixture
def create_press_kit(client) -> Callable[..., dict]:
    def _create(headers: dict, **fields) -> dict:
        payload = {"title": "My Press Kit", **fields}
        response = client.post("/pressKits", json=payload, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
