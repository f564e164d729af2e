"""Async SQLAlchemy setup for the DQI report store.

Provides:
- Base: DeclarativeBase for the report store tables
- build_engine: async engine for a URL (settings by default)
- engine / async_session_factory: the process-wide engine and session maker
- create_tables: create the report store schema on an engine
- get_async_session: session provider with Unit-of-Work commit/rollback
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import StaticPool

from src.config.settings import get_settings


class Base(DeclarativeBase):
    """Base class for the report store ORM models."""

    pass


def build_engine(url: str | None = None) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to ``DATABASE_URL``).

    In-memory SQLite keeps a single shared connection, otherwise every
    pooled connection would see its own empty database.
    """
    url = url or get_settings().DATABASE_URL
    if url.startswith("sqlite") and ":memory:" in url:
        return create_async_engine(url, echo=False, poolclass=StaticPool)
    return create_async_engine(url, echo=False, pool_pre_ping=True)


engine = build_engine()

async_session_factory = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def create_tables(bind: AsyncEngine | None = None) -> None:
    """Create the report store tables on ``bind`` (defaults to ``engine``)."""
    import src.db.tables  # noqa: F401  registers DQIReportRow on Base.metadata

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def get_async_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield a session; commit once on success, roll back on any exception.

    Repositories only call add()/flush()/refresh().
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
