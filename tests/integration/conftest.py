"""Integration-test fixtures.

All integration tests share a single event-loop so that the module-level
SQLAlchemy async engine pool and Redis pool (both created at import time)
remain valid across the entire test session.

Requires a migrated PostgreSQL (`alembic upgrade head`) and Redis; set
BL_INTEGRATION=1 to run them.
"""

import os
from collections.abc import AsyncIterator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from config.settings import settings
from src.main import app
from tests.integration.helpers import SignIn, unique


def pytest_collection_modifyitems(config: pytest.Config, items: list[pytest.Item]) -> None:
    if os.environ.get("BL_INTEGRATION") == "1":
        return
    skip = pytest.mark.skip(reason="set BL_INTEGRATION=1 with PG + Redis running")
    for item in items:
        if "integration" in item.nodeid:
            item.add_marker(skip)


@pytest_asyncio.fixture(loop_scope="session")
async def sign_in() -> AsyncIterator[SignIn]:
    """Factory: one cookie-carrying client per signed-in account."""
    clients: list[AsyncClient] = []

    async def _sign_in(username: str, password: str) -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        resp = await client.post(
            "/api/v1/auth/login", json={"username": username, "password": password}
        )
        assert resp.status_code == 200, resp.text
        return client

    yield _sign_in
    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture(loop_scope="session")
async def root_admin(sign_in: SignIn) -> AsyncClient:
    return await sign_in(settings.ROOT_ADMIN_USERNAME, settings.ROOT_ADMIN_PASSWORD)


@pytest_asyncio.fixture(loop_scope="session")
async def funded_subadmin(
    root_admin: AsyncClient, sign_in: SignIn
) -> tuple[AsyncClient, dict]:
    """A fresh SubAdmin with 1,000.00 Br issued by the root admin."""
    username = unique("hub")
    resp = await root_admin.post(
        "/api/v1/subadmins",
        json={
            "name": unique("Hub "),
            "username": username,
            "password": "Secret#123",
            "credit": 100000,
        },
    )
    assert resp.status_code == 201, resp.text
    return await sign_in(username, "Secret#123"), resp.json()["data"]


@pytest_asyncio.fixture(loop_scope="session")
async def funded_user(
    funded_subadmin: tuple[AsyncClient, dict], sign_in: SignIn
) -> tuple[AsyncClient, dict]:
    """A fresh User with 100.00 Br allocated by `funded_subadmin`."""
    subadmin, _ = funded_subadmin
    username = unique("player")
    resp = await subadmin.post(
        "/api/v1/users",
        json={
            "name": unique("Shop "),
            "username": username,
            "password": "Secret#123",
            "credit": 10000,
            "user_commission": 20,
        },
    )
    assert resp.status_code == 201, resp.text
    return await sign_in(username, "Secret#123"), resp.json()["data"]
