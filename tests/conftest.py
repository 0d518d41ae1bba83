"""
Shared fixtures: a fresh SQLite database per test, the FastAPI app wired to
it, and HTTP clients talking to the app in-process through ASGITransport.
"""

import os
from datetime import datetime
from decimal import Decimal

# Settings are read at import time; point them at SQLite before the package loads
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ["AUTO_CREATE_TABLES"] = "false"

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from expense_tracker.client.api import TransactionsClient
from expense_tracker.core.rate_limit import SlidingWindowRateLimiter
from expense_tracker.db.base_class import Base
from expense_tracker.db.database import get_async_db
from expense_tracker.schemas.transaction import TransactionCreate

BASE_URL = "http://test"


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'expenses.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def app(session_factory):
    from expense_tracker.main import app

    async def override_get_async_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_async_db] = override_get_async_db
    app.state.rate_limiter = SlidingWindowRateLimiter(limit=10_000, window_seconds=900)
    yield app
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def http_client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url=BASE_URL) as client:
        yield client


@pytest_asyncio.fixture
async def api_client(http_client):
    async with TransactionsClient(f"{BASE_URL}/api", http_client=http_client) as client:
        yield client


@pytest.fixture
def make_transaction():
    """Build a valid TransactionCreate, overriding any field."""

    def _make(**overrides) -> TransactionCreate:
        fields = {
            "user_id": "user-1",
            "title": "Coffee",
            "amount": Decimal("-150"),
            "category": "food",
            "date": datetime(2026, 10, 1, 9, 30),
        }
        fields.update(overrides)
        return TransactionCreate(**fields)

    return _make
