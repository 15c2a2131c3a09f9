"""
Notes Backend - Database Session Management
============================================

What:  Async SQLAlchemy engine, session factory, declarative base and the
       FastAPI session dependency.
How:   create_app() builds one engine + session factory from Settings and
       parks them on app.state; get_db_session() opens one session per request
       and rolls back on error. Mutating handlers commit with commit_session()
       before they respond.
Who:   Route handlers via Depends(get_db_session); the maintenance script.

Connection Pooling (PostgreSQL):
    pool_size=20, max_overflow=10, pool_pre_ping, pool_recycle=3600.
    SQLite (tests, local experiments) uses SQLAlchemy's default pool, which
    does not accept the sizing arguments.
"""

import logging
from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from notesapp.config import Settings
from notesapp.exceptions import DatabaseError

logger = logging.getLogger(__name__)


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Every model registers on this metadata, which Alembic reads for
    --autogenerate and the test suite uses for create_all().
    """
    pass


# ── Engine & Session Factory ──────────────────────────────────────────────
def build_engine(settings: Settings) -> AsyncEngine:
    """
    Create the async engine for the configured database URL.

    Pool sizing is only applied to server databases; SQLite URLs get the
    driver defaults.
    """
    if settings.is_sqlite:
        return create_async_engine(
            settings.database_url,
            echo=settings.log_level == "DEBUG",
        )

    return create_async_engine(
        settings.database_url,
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_pre_ping=settings.db_pool_pre_ping,
        pool_recycle=3600,
        echo=settings.log_level == "DEBUG",
    )


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Session factory with expire_on_commit=False so ORM objects stay readable
    after the request transaction commits.
    """
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Opens a session from the factory stored on app.state
        2. Yields it to the route handler
        3. On error: rolls back and re-raises for the global handlers
        4. Always: closes the session (returns connection to pool)

    The dependency never commits. Its exit code may run after the response
    has been sent, so mutating handlers call commit_session() themselves
    before building their response; anything left uncommitted is discarded
    on close.

    Example usage in a route:
        @router.post("/notes")
        async def create_note(db: AsyncSession = Depends(get_db_session)):
            ...
            await commit_session(db)
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def commit_session(db: AsyncSession) -> None:
    """
    Commit the request transaction from inside the handler.

    A failed commit is rolled back and raised as DatabaseError, so the
    client receives the 500 envelope instead of a success response.
    """
    try:
        await db.commit()
    except SQLAlchemyError as e:
        logger.error("Commit failed: %s", type(e).__name__, exc_info=True)
        await db.rollback()
        raise DatabaseError(
            message="Failed to save changes.",
            context={"operation": "commit", "error_type": type(e).__name__},
        )


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine(engine: AsyncEngine) -> None:
    """Closes all pooled connections. Called during application shutdown."""
    await engine.dispose()
