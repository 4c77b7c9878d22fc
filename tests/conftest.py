"""Pytest configuration and shared fixtures."""

import os

# Point the application at SQLite before any wikigraph module builds its engine
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

from collections.abc import AsyncGenerator  # noqa: E402
from pathlib import Path  # noqa: E402
from typing import Any  # noqa: E402
from uuid import UUID  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402
from uuid6 import uuid7  # noqa: E402

from wikigraph.db import build_engine, get_db, init_db  # noqa: E402
from wikigraph.main import app  # noqa: E402
from wikigraph.services import ArticleLockRegistry, ArticleService  # noqa: E402


# =============================================================================
# Database fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """A fresh SQLite database file per test, with all tables created."""
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'wikigraph.db'}", echo=False)
    await init_db(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory configured like the application's."""
    return async_sessionmaker(engine, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for testing."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def locks() -> ArticleLockRegistry:
    """Per-article lock registry shared by the services under test."""
    return ArticleLockRegistry()


@pytest.fixture
def user_id() -> UUID:
    return uuid7()


@pytest.fixture
def article_service(db_session: AsyncSession, locks: ArticleLockRegistry) -> ArticleService:
    return ArticleService(db_session, locks)


# =============================================================================
# API fixtures
# =============================================================================


@pytest_asyncio.fixture(scope="function")
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    locks: ArticleLockRegistry,
) -> AsyncGenerator[AsyncClient, None]:
    """Create an asynchronous test client for FastAPI with DB override."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.state.article_locks = locks

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers(user_id: UUID) -> dict[str, str]:
    """Headers identifying the acting user on write requests."""
    return {"X-User-Id": str(user_id)}


# =============================================================================
# Sample data
# =============================================================================


@pytest.fixture
def sample_markdown() -> str:
    """A markdown file with front matter and wiki-links."""
    return (
        "---\n"
        "title: Asyncio basics\n"
        "status: published\n"
        "tags: [python, async]\n"
        "---\n"
        "# Asyncio\n"
        "\n"
        "The event loop runs [[Coroutines]] and [[Tasks|tasks]].\n"
        "See also [[Python]].\n"
    )


@pytest.fixture
def sample_article_data() -> dict[str, Any]:
    """Sample article payload for API tests."""
    return {
        "title": "Python",
        "content": "Python supports [[Asyncio]] and [[Typing|type hints]].\n",
        "status": "PUBLISHED",
    }
