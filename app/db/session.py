from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.config import settings

engine = create_async_engine(
    settings.database_url,
    pool_pre_ping=True,   # Survives the poll loop outliving a dropped connection
    pool_size=5,
    max_overflow=10,
    echo=settings.debug,  # Log SQL in debug mode
)

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency that yields a database session per request."""
    async with AsyncSessionLocal() as session:
        yield session


@asynccontextmanager
async def worker_session() -> AsyncGenerator[AsyncSession, None]:
    """Session for Celery tasks.

    Tasks run each job under a fresh ``asyncio.run`` loop, so they get a
    throwaway engine bound to that loop instead of the shared pool.
    """
    worker_engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    try:
        async with async_sessionmaker(worker_engine, expire_on_commit=False)() as session:
            yield session
    finally:
        await worker_engine.dispose()
