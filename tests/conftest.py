"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator
from datetime import datetime

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tripgen.config import ProviderConfig
from tripgen.db.inmemory import InMemoryTripRepository
from tripgen.db.models import Base
from tripgen.db.sql_repositories import SqlTripRepository
from tripgen.models.trip import TripRequest


@pytest.fixture
def offline_config() -> ProviderConfig:
    """Provider config with every live provider unavailable."""
    return ProviderConfig()


@pytest.fixture
def rome_request() -> TripRequest:
    """Three-day London to Rome trip for two."""
    return TripRequest(
        destination="Rome",
        origin="London",
        start_date=datetime(2026, 5, 1, 10, 0),
        end_date=datetime(2026, 5, 4, 10, 0),
        travelers=2,
        budget=1500,
    )


@pytest.fixture
def memory_repository() -> InMemoryTripRepository:
    return InMemoryTripRepository()


@pytest_asyncio.fixture
async def sqlite_engine() -> AsyncGenerator[AsyncEngine, None]:
    """Async engine on a shared in-memory sqlite database with tables created."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def sql_repository(sqlite_engine: AsyncEngine) -> SqlTripRepository:
    return SqlTripRepository(async_sessionmaker(sqlite_engine, expire_on_commit=False))


@pytest_asyncio.fixture
async def sqlite_session(sqlite_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSession(sqlite_engine) as session:
        yield session
