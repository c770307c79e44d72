"""Pytest configuration and shared fixtures.

Database tests run against an in-memory SQLite database through aiosqlite unless
TEST_DATABASE_URL points at a real server.
"""

from __future__ import annotations

import os
from collections.abc import AsyncIterator, Awaitable, Callable
from pathlib import Path
from typing import Any

# Settings are validated at import time, so provide them before importing the app.
os.environ.setdefault("POSTGRES_USER", "meetyou")
os.environ.setdefault("POSTGRES_PASSWORD", "meetyou")
os.environ.setdefault("POSTGRES_HOST", "localhost")
os.environ.setdefault("POSTGRES_PORT", "5432")
os.environ.setdefault("POSTGRES_DB", "meetyou")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["ENVIRONMENT"] = "test"

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import (  # noqa: E402
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.db.base import Base  # noqa: E402
from app.db.models import Interest, User  # noqa: E402
from app.main import create_app  # noqa: E402
from app.services.photo_storage import PhotoStorage  # noqa: E402

test_database_url = os.getenv("TEST_DATABASE_URL", "sqlite+aiosqlite:///:memory:")


def _create_test_engine() -> AsyncEngine:
    if not test_database_url.startswith("sqlite"):
        return create_async_engine(test_database_url, pool_pre_ping=True)

    # One shared connection keeps the in-memory database alive for the whole test.
    engine = create_async_engine(
        test_database_url,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection: Any, _record: Any) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    return engine


@pytest_asyncio.fixture
async def test_engine() -> AsyncIterator[AsyncEngine]:
    """Creates a fresh schema for each test and drops it afterwards."""
    engine = _create_test_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(test_engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Creates a database session for a test (function-scoped)."""
    session_maker = async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_maker() as session:
        yield session


@pytest.fixture
def photo_storage(tmp_path: Path) -> PhotoStorage:
    """Photo storage rooted in a per-test temporary directory."""
    return PhotoStorage(tmp_path / "photos")


@pytest.fixture
def make_user(db_session: AsyncSession) -> Callable[..., Awaitable[User]]:
    """Factory fixture that persists a user, optionally with interests."""
    counter = 0

    async def _make_user(email: str | None = None, interests: list[Interest] | None = None) -> User:
        nonlocal counter
        counter += 1
        user = User(email=email or f"user{counter}@example.com", interests=interests or [])
        db_session.add(user)
        await db_session.flush()
        return user

    return _make_user


@pytest.fixture
def app() -> FastAPI:
    """Creates a FastAPI app for synchronous tests (function-scoped)."""
    return create_app()


@pytest.fixture
def http_client(app: FastAPI) -> TestClient:
    """Creates a synchronous http client."""
    return TestClient(app)
