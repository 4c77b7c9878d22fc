"""
Database session management for FastAPI and standalone usage.

This module provides:
- FastAPI dependency for request-scoped database sessions
- Context manager for scripts and tests
- The transaction helper that defines the engine's atomic unit

Usage in FastAPI:
    @router.get("/articles")
    async def list_articles(db: AsyncSession = Depends(get_db)):
        ...

Usage in scripts:
    async with get_db_context() as db:
        async with transaction(db):
            await LinkGraphService(db).sync_links(article.id, article.content)
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from wikigraph.core.errors import ConflictError, StoreFailure
from wikigraph.db.base import AsyncSessionLocal

# SQLSTATE codes that mean "another transaction got there first"
CONFLICT_SQLSTATES = {
    "40001",  # serialization_failure
    "40P01",  # deadlock_detected
    "55P03",  # lock_not_available
}


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session.

    One session per request, closed when the request completes. Writes are
    committed by the services through `transaction()`.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


@asynccontextmanager
async def get_db_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Context manager for database sessions outside of FastAPI.

    Use this in CLI scripts and tests. The session is closed when the
    context exits, even if an exception occurs.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()


def translate_store_error(exc: SQLAlchemyError) -> ConflictError | StoreFailure:
    """
    Map a SQLAlchemy error onto the engine's error kinds.

    Unique violations and serialization / deadlock / lock-timeout failures
    are conflicts; everything else is an opaque store failure.
    """
    if isinstance(exc, IntegrityError):
        return ConflictError(f"Concurrent write conflict: {exc.orig}")
    if isinstance(exc, DBAPIError):
        sqlstate = getattr(exc.orig, "sqlstate", None) or getattr(exc.orig, "pgcode", None)
        if sqlstate in CONFLICT_SQLSTATES:
            return ConflictError(f"Concurrent write conflict: {exc.orig}")
    return StoreFailure(f"Store operation failed: {exc.__class__.__name__}")


@asynccontextmanager
async def transaction(session: AsyncSession) -> AsyncGenerator[AsyncSession, None]:
    """
    Run the enclosed operations as one atomic unit.

    - Commits on successful completion
    - Rolls back on any exception
    - Re-raises SQLAlchemy errors as ConflictError / StoreFailure

    Usage:
        async with transaction(db):
            await revisions.append(...)
            await links.sync_links(...)
            # Both are committed or neither is committed
    """
    try:
        yield session
        await session.commit()
    except SQLAlchemyError as exc:
        await session.rollback()
        raise translate_store_error(exc) from exc
    except Exception:
        await session.rollback()
        raise
