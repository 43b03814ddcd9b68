"""Async engine and session factory for the `database` storage backend.

Imported lazily by `build_stores()` so the in-memory backend never opens a pool.
"""

from __future__ import annotations

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from islanders.config import get_settings


settings = get_settings()

engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=10,
    max_overflow=5,
)

# Stores open one short-lived session per call; objects stay usable after commit.
async_session = async_sessionmaker(engine, expire_on_commit=False)


async def dispose_engine() -> None:
    await engine.dispose()
