"""Shared test fixtures."""

import os

# Settings are read at import time; JWT_SECRET has no default.
os.environ.setdefault("JWT_SECRET", "test-secret-key-for-unit-tests-only")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("LOGIN_RATE_LIMIT_PER_MINUTE", "0")

import pytest  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402

from src.main import app  # noqa: E402
from tests.fakes import (  # noqa: E402
    FakeAccountRepository,
    FakeBalanceRepository,
    FakeGameRepository,
    FakeHistoryRepository,
    FakeSession,
    InMemoryStore,
)


@pytest.fixture
async def client() -> AsyncClient:
    """Async HTTP client for testing FastAPI endpoints."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def db() -> FakeSession:
    return FakeSession()


@pytest.fixture
def accounts(store: InMemoryStore) -> FakeAccountRepository:
    return FakeAccountRepository(store)


@pytest.fixture
def balances(store: InMemoryStore) -> FakeBalanceRepository:
    return FakeBalanceRepository(store)


@pytest.fixture
def history(store: InMemoryStore) -> FakeHistoryRepository:
    return FakeHistoryRepository(store)


@pytest.fixture
def games(store: InMemoryStore) -> FakeGameRepository:
    return FakeGameRepository(store)
