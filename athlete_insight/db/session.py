"""
Database Session Management

Provides async engine and session factory for the local cache.
"""

from sqlalchemy.pool import StaticPool
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)


def _get_async_url(url: str) -> str:
    """Convert sync database URL to async version."""
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///")
    elif url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://")
    return url


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create async engine for a database URL.

    In-memory SQLite shares one connection so every session sees the
    same tables.
    """
    url = _get_async_url(database_url)

    if url.startswith("sqlite"):
        if ":memory:" in url or url.rstrip("/").endswith("aiosqlite:"):
            return create_async_engine(
                url,
                connect_args={"check_same_thread": False},
                poolclass=StaticPool,
            )
        return create_async_engine(
            url,
            connect_args={"check_same_thread": False}
        )
    elif url.startswith("postgresql"):
        # PostgreSQL with connection pool settings
        return create_async_engine(
            url,
            pool_size=5,
            max_overflow=10,
            pool_timeout=30,
            pool_recycle=1800,  # 30 minutes
        )
    return create_async_engine(url)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Async session factory bound to engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )
