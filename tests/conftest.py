"""Shared pytest fixtures for the DQI test suite.

Provides:
- db_engine: in-memory SQLite async engine with all tables
- db_session: SAVEPOINT-isolated async session (app commits don't leak)
- dqi_engine: DQIEngine with default scoring config
- fixed_now: reference time for date-sensitive scoring
- sample_report: DQIReport over a small order file
"""

from datetime import UTC, datetime

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession

from src.db.session import build_engine, create_tables
from src.quality.service import DQIEngine


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def fixed_now() -> datetime:
    """Reference 'now' used by every date-sensitive test."""
    return datetime(2026, 6, 1, tzinfo=UTC)


@pytest.fixture
def dqi_engine() -> DQIEngine:
    return DQIEngine()


@pytest.fixture
async def db_engine():
    """Create an in-memory SQLite async engine with all tables."""
    eng = build_engine("sqlite+aiosqlite:///:memory:")
    await create_tables(eng)
    yield eng
    await eng.dispose()


@pytest.fixture
async def db_session(db_engine):
    """Provide a SAVEPOINT-isolated session.

    The outer transaction is never committed; it rolls back at teardown.
    Application code calling session.commit() triggers a SAVEPOINT release,
    which is then restarted so subsequent operations stay in the same
    outer transaction. This ensures full test isolation.
    """
    async with db_engine.connect() as conn:
        trans = await conn.begin()
        session = AsyncSession(bind=conn, expire_on_commit=False)

        # Start a nested SAVEPOINT
        nested = await conn.begin_nested()

        @event.listens_for(session.sync_session, "after_transaction_end")
        def restart_savepoint(sync_session, transaction):  # noqa: ARG001
            nonlocal nested
            if transaction.nested and not transaction._parent.nested:
                nested = conn.sync_connection.begin_nested()

        yield session

        await session.close()
        await trans.rollback()


SAMPLE_CSV = (
    "order_id,customer,amount,order_date\n"
    "1,alice,120.50,2026-01-15\n"
    "2,bob,75,2026-02-01\n"
    "3,,40,2026-03-10\n"
    "3,,40,2026-03-10\n"
    "4,dave,-15,2027-01-01\n"
)


@pytest.fixture
async def sample_report(dqi_engine: DQIEngine, fixed_now: datetime):
    """Report over a small order file with a duplicate and a future date."""
    return await dqi_engine.analyze(
        SAMPLE_CSV.encode(), file_name="orders.csv", now=fixed_now
    )
