import asyncio
import os
import tempfile
from pathlib import Path

import pytest

# Settings are read at import time, so the test database and secret must be in
# place before any project module is imported.
_TMP_DIR = Path(tempfile.mkdtemp(prefix="egg-ledger-tests-"))
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TMP_DIR / 'eggs.db'}"
os.environ["JWT_SECRET"] = "test-secret-not-for-production"

from fastapi.testclient import TestClient  # noqa: E402

from core.inventory import ensure_inventory  # noqa: E402
from db.database import async_session_maker, create_db_and_tables, drop_db_and_tables  # noqa: E402


async def _fresh_database() -> None:
    await drop_db_and_tables()
    await create_db_and_tables()
    async with async_session_maker() as db:
        await ensure_inventory(db)


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables and an all-zero inventory row."""
    asyncio.run(_fresh_database())
    yield


@pytest.fixture()
def run():
    """Run `fn(session, *args, **kwargs)` on a new session and event loop."""
    def _run(fn, *args, **kwargs):
        async def _go():
            async with async_session_maker() as db:
                return await fn(db, *args, **kwargs)
        return asyncio.run(_go())
    return _run


@pytest.fixture()
def client():
    from main import app

    with TestClient(app) as c:
        yield c


def register_and_login(client: TestClient, username: str, password: str = "secret123", role=None) -> dict:
    body = {"username": username, "password": password}
    if role:
        body["role"] = role
    assert client.post("/api/register", json=body).status_code == 200
    res = client.post("/api/login", json={"username": username, "password": password})
    assert res.status_code == 200
    return {"Authorization": f"Bearer {res.json()['token']}"}


@pytest.fixture()
def auth_headers(client):
    return register_and_login(client, "vendedor1")


@pytest.fixture()
def admin_headers(client):
    return register_and_login(client, "boss", role="admin")


@pytest.fixture()
def login(client):
    """Register a user and return bearer headers for it."""
    def _login(username: str, password: str = "secret123", role=None) -> dict:
        return register_and_login(client, username, password, role)
    return _login
