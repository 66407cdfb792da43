"""
Bookstore Backend — Test Configuration (conftest.py)
======================================================

What:  Shared pytest fixtures for the entire test suite.
How:   Every test gets its own SQLite file (aiosqlite driver) under tmp_path,
       so tests never share rows and never need a PostgreSQL server.

Fixture Hierarchy (all function-scoped):
    ├── test_settings:   Settings pointing at a fresh SQLite file
    ├── database:        Database with the books table created
    ├── db_session:      AsyncSession on that database
    ├── mock_db_session: AsyncMock standing in for a session (failure tests)
    ├── app:             create_app(test_settings) with tables created
    ├── test_client:     HTTPX AsyncClient bound to `app`
    └── seeded_client:   test_client with `book` already stored
"""

import os
import tempfile
from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport


# ══════════════════════════════════════════════════════════════════════════
# Environment Setup
# ══════════════════════════════════════════════════════════════════════════

# Set BEFORE any bookstore import: bookstore.main builds a default app, and
# the default settings must not point at a real PostgreSQL database
os.environ["DATABASE_URL"] = (
    f"sqlite+aiosqlite:///{tempfile.mkdtemp(prefix='bookstore_test_')}/default.db"
)
os.environ["LOG_LEVEL"] = "WARNING"

from bookstore.config import Settings  # noqa: E402
from bookstore.database import Database  # noqa: E402
from bookstore.services.book_store import BookStore  # noqa: E402


# ══════════════════════════════════════════════════════════════════════════
# Sample Data
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def book():
    """A valid book, stored by `seeded_client`."""
    return {
        "isbn": "0691161518",
        "amazon_url": "http://a.co/eobPtX2",
        "author": "Matthew Lane",
        "language": "english",
        "pages": 264,
        "publisher": "Princeton University Press",
        "title": "Power-Up: Unlocking the Hidden Mathematics in Video Games",
        "year": 2017,
    }


@pytest.fixture
def book1():
    """A second valid book, never pre-loaded."""
    return {
        "isbn": "0593466497",
        "amazon_url": "https://www.amazon.com/Tomorrow-novel-Gabrielle-Zevin-ebook/dp/B09JBCGQB8",
        "author": "Gabrielle Zevin",
        "language": "english",
        "pages": 401,
        "publisher": "Knopf",
        "title": "Tomorrow, and Tomorrow, and Tomorrow: A Novel",
        "year": 2022,
    }


@pytest.fixture
def book_update():
    """A valid PUT body for `book` (no isbn, new amazon_url)."""
    return {
        "amazon_url": "https://www.amazon.com/dp/0691161518/ref=cm_sw_r_cp_ep_dp_R3uoBbMZG0JP2",
        "author": "Matthew Lane",
        "language": "english",
        "pages": 264,
        "publisher": "Princeton University Press",
        "title": "Power-Up: Unlocking the Hidden Mathematics in Video Games",
        "year": 2017,
    }


# ══════════════════════════════════════════════════════════════════════════
# Database Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'books.db'}",
        log_level="WARNING",
    )


@pytest_asyncio.fixture
async def database(test_settings):
    db = Database(test_settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest_asyncio.fixture
async def db_session(database):
    async with database.session_factory() as session:
        yield session


@pytest.fixture
def mock_db_session():
    """
    Provides a mock async database session.

    Usage:
        mock_db_session.execute.side_effect = SQLAlchemyError("boom")
        await BookStore(mock_db_session).get_all()
    """
    session = AsyncMock()
    session.execute = AsyncMock()
    session.commit = AsyncMock()
    session.rollback = AsyncMock()
    session.close = AsyncMock()
    session.add = MagicMock()
    return session


# ══════════════════════════════════════════════════════════════════════════
# Application Fixtures
# ══════════════════════════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def app(test_settings):
    """
    A fresh application bound to this test's SQLite file.

    ASGITransport does not send lifespan events, so tables are created here.
    """
    from bookstore.main import create_app

    application = create_app(test_settings)
    await application.state.database.create_all()
    yield application
    await application.state.database.dispose()


@pytest_asyncio.fixture
async def test_client(app):
    """
    HTTPX AsyncClient routed straight into the app (no server).

    Usage:
        async def test_health(test_client):
            response = await test_client.get("/health")
            assert response.status_code == 200
    """
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def seeded_client(app, test_client, book):
    async with app.state.database.session_factory() as session:
        await BookStore(session).create(book)
    return test_client
