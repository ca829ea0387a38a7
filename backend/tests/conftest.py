"""Pytest configuration and shared fixtures."""

import os
import uuid
from collections.abc import AsyncGenerator
from uuid import UUID

os.environ.setdefault("ENV", "test")

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

import culturebridge.models  # noqa: F401  (register tables on Base.metadata)
from culturebridge.core.dependencies import get_ledger
from culturebridge.db.base import Base
from culturebridge.db.engine import create_db_engine
from culturebridge.db.session import create_session_factory, get_db
from culturebridge.exchanges.service import SqlParticipationCounter
from culturebridge.ledger.gateway import SqlLedgerGateway
from culturebridge.main import create_app
from culturebridge.rewards.catalog import RewardCatalog
from culturebridge.rewards.service import RewardEngine

pytest_plugins = ("pytest_asyncio",)


@pytest.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """Fresh SQLite file database per test, with all tables created."""
    engine = create_db_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return create_session_factory(db_engine)


@pytest.fixture(scope="function")
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def ledger(session_factory: async_sessionmaker[AsyncSession]) -> SqlLedgerGateway:
    return SqlLedgerGateway(session_factory)


@pytest.fixture
def catalog() -> RewardCatalog:
    """Default catalog: 0.05 USD per CBT, 50 CBT daily cap."""
    return RewardCatalog()


@pytest.fixture
def reward_engine(ledger: SqlLedgerGateway, catalog: RewardCatalog) -> RewardEngine:
    return RewardEngine(ledger, catalog)


@pytest.fixture
def counter(db_session: AsyncSession) -> SqlParticipationCounter:
    return SqlParticipationCounter(db_session)


@pytest.fixture
def user_id() -> UUID:
    return uuid.uuid4()


@pytest.fixture
def auth_headers(user_id: UUID) -> dict[str, str]:
    return {"X-User-Id": str(user_id)}


@pytest.fixture(scope="function")
async def async_client(
    session_factory: async_sessionmaker[AsyncSession],
    ledger: SqlLedgerGateway,
) -> AsyncGenerator[AsyncClient, None]:
    """API client bound to the per-test database."""
    app = create_app()

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_ledger] = lambda: ledger

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client
