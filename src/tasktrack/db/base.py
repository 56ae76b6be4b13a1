"""Database connection and session management."""

from typing import Any

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from tasktrack.config import settings


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


def engine_options(database_url: str) -> dict[str, Any]:
    """Pool options for the given backend.

    SQLite connections are not pooled by size, so only PostgreSQL gets them.
    """
    options: dict[str, Any] = {"echo": settings.debug}
    if database_url.startswith("postgresql"):
        options.update(pool_pre_ping=True, pool_size=20, max_overflow=10)
    return options


# Create async engine
engine = create_async_engine(settings.database_url, **engine_options(settings.database_url))

# Create async session factory
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def init_db() -> None:
    """Initialize database tables."""
    import tasktrack.db.tables  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    """Close database connections."""
    await engine.dispose()
