"""
Bookstore Backend — Database Session Management
=================================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   `Database` owns the engine and session factory. The application factory
       builds one instance, stores it on `app.state.database`, and the
       lifespan disposes it on shutdown. Routes get a session per request
       through `get_db_session`.

Connection Pooling Strategy (server databases only):
    pool_size / max_overflow: from settings
    pool_pre_ping:            validates connections before use
    pool_recycle=3600:        recycles connections every hour
    SQLite (aiosqlite) keeps SQLAlchemy's default pool.
"""

import logging
from typing import Any, AsyncGenerator, Dict

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from bookstore.config import Settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object, used by Alembic --autogenerate and by
    `Database.create_all()`.
    """
    pass


class Database:
    """
    Process-wide database resource: one engine, one session factory.

    Constructed explicitly (never at import time) so each application
    instance, and each test, owns its own connection pool.
    """

    def __init__(self, settings: Settings):
        engine_kwargs: Dict[str, Any] = {
            # Echo SQL queries in DEBUG mode for development visibility
            "echo": settings.log_level == "DEBUG",
        }
        if not settings.is_sqlite:
            engine_kwargs.update(
                pool_size=settings.db_pool_size,
                max_overflow=settings.db_max_overflow,
                pool_pre_ping=settings.db_pool_pre_ping,
                pool_recycle=3600,
            )

        self.engine: AsyncEngine = create_async_engine(settings.database_url, **engine_kwargs)

        # expire_on_commit=False: returned rows stay readable after commit
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    async def create_all(self) -> None:
        """Create every table registered on Base.metadata (idempotent)."""
        # Import registers the model with Base.metadata
        from bookstore.models.book import Book  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Database tables ensured")

    async def ping(self) -> bool:
        """Run SELECT 1; True when the database answers."""
        try:
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database ping failed: %s", str(e))
            return False

    async def dispose(self) -> None:
        """
        Gracefully closes all connections in the pool.

        Called during application shutdown (lifespan handler).
        """
        await self.engine.dispose()


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's Database
        2. Yields it to the route handler
        3. On error: rolls back the transaction (discards pending changes)
        4. Always: closes the session (returns connection to pool)

    The book store commits its own single-statement writes, so nothing is
    committed here.
    """
    database: Database = request.app.state.database
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
