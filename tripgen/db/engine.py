"""Async engine and session factory for the trip store."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from tripgen.config import Settings, get_settings
from tripgen.db.models import Base


def create_async_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Build the async engine for settings.database_url.

    Plain postgresql:// URLs are routed to the asyncpg driver. An in-memory
    sqlite URL gets a single shared connection so every session sees the
    same database.

    Raises:
        ValueError: DATABASE_URL is unset or empty
    """
    url = settings.database_url
    if not url:
        raise ValueError("DATABASE_URL is not set; configure a PostgreSQL or sqlite URL")

    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url.removeprefix("postgresql://")

    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(
            url, poolclass=StaticPool, connect_args={"check_same_thread": False}
        )

    return create_async_engine(url, pool_pre_ping=True)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory used by SqlTripRepository (one session per operation)."""
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create missing tables."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


_engine: AsyncEngine | None = None


def get_async_engine() -> AsyncEngine:
    """Process-wide engine, created on first use."""
    global _engine
    if _engine is None:
        _engine = create_async_engine_from_settings(get_settings())
    return _engine
