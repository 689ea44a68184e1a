"""Database session management with async SQLAlchemy."""

from typing import Any, AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool, StaticPool

from galant.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Pool options for a database URL.

    In-memory SQLite shares one connection so every session sees the same
    schema; file SQLite keeps the default pool; servers get a sized pool.
    """
    url = make_url(database_url)
    options: dict[str, Any] = {"echo": settings.DATABASE_ECHO, "pool_pre_ping": True}

    if url.get_backend_name() == "sqlite":
        options["connect_args"] = {"check_same_thread": False}
        if url.database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
    elif settings.ENVIRONMENT == "test":
        options["poolclass"] = NullPool
    else:
        options["pool_size"] = settings.DATABASE_POOL_SIZE
        options["max_overflow"] = settings.DATABASE_MAX_OVERFLOW
    return options


def build_engine(database_url: str | None = None) -> AsyncEngine:
    database_url = database_url or settings.DATABASE_URL
    return create_async_engine(database_url, **engine_options(database_url))


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # Placements and schema events are read back after commit
    return async_sessionmaker(bind, class_=AsyncSession, expire_on_commit=False, autoflush=False)


engine = build_engine()
AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        finally:
            await session.close()
