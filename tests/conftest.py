"""Shared pytest fixtures for the PowerBill API test suite."""

from contextlib import asynccontextmanager
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from app.db.session import get_db
from app.main import app


@pytest.fixture
def db_session() -> AsyncMock:
    """Mock AsyncSession; repository functions are patched per test."""
    session = AsyncMock()
    session.execute = AsyncMock(return_value=MagicMock())
    session.commit = AsyncMock()
    session.add = MagicMock()
    return session


@pytest.fixture(autouse=True)
def _override_db(db_session: AsyncMock):
    async def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncClient:
    """Async test client that talks directly to the ASGI app (no lifespan, no network)."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac


@pytest.fixture
def session_factory(db_session: AsyncMock):
    """Stand-in for async_sessionmaker: calling it opens a context yielding db_session."""

    @asynccontextmanager
    async def _factory():
        yield db_session

    return _factory
