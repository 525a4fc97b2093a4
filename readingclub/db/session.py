"""
Async engine and session factory for the Reading Club store.

PostgreSQL (asyncpg) in production, SQLite (aiosqlite) for local runs and
tests. The engine is created once at import and disposed by the app lifespan.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from readingclub.core.config import settings


def engine_options(url: str) -> dict[str, Any]:
    """Pool settings for the backend named by *url*.

    An in-memory SQLite database only exists on its connection, so it gets a
    single shared one.
    """
    options: dict[str, Any] = {"echo": False, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        options.update(pool_size=20, max_overflow=10, pool_recycle=300)
    elif url.startswith("sqlite") and ":memory:" in url:
        options["poolclass"] = StaticPool
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)
