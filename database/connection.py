"""
Database connection module - Async SQLAlchemy engine and session management.

Provides async database engine and session factory for the application.
All database operations should use get_async_session() context manager.
"""

from collections.abc import AsyncGenerator, Callable
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shared.config import get_settings

# Type of every session factory the catalog services accept
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


def _engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for server databases; SQLite manages its own pool."""
    if database_url.startswith("sqlite"):
        return {}
    return {
        "pool_size": 10,  # Number of connections to maintain in the pool
        "max_overflow": 20,  # Maximum number of connections to create beyond pool_size
        "pool_pre_ping": True,  # Verify connections before using them
    }


settings = get_settings()

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DATABASE_ECHO,
    **_engine_options(settings.DATABASE_URL),
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,  # Don't expire objects after commit
    autocommit=False,
    autoflush=False,
)


def build_session_scope(
    session_maker: async_sessionmaker[AsyncSession],
) -> SessionFactory:
    """
    Wrap a sessionmaker into a get_async_session-style context manager.

    Tests use this to point the catalog services at their own engine.
    """

    @asynccontextmanager
    async def session_scope() -> AsyncGenerator[AsyncSession, None]:
        async with session_maker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    return session_scope


_default_scope = build_session_scope(AsyncSessionLocal)


@asynccontextmanager
async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """
    Async context manager for database sessions.

    Usage:
        async with get_async_session() as session:
            result = await session.execute(select(MotorcycleModel))
            models = result.scalars().all()

    Yields:
        AsyncSession: Database session instance
    """
    async with _default_scope() as session:
        yield session


async def init_db() -> None:
    """
    Initialize database by creating all tables.

    NOTE: In production, use Alembic migrations instead.
    This function is useful for testing or initial setup.
    """
    from database.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """
    Close database engine and all connections.

    Call this during application shutdown.
    """
    await engine.dispose()
