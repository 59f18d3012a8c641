"""Pytest configuration and fixtures for API and service tests."""
import os
import tempfile

# Set test env BEFORE any imports that use config
_db_dir = tempfile.mkdtemp(prefix="arena-test-")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{os.path.join(_db_dir, 'test.db')}"
os.environ["INITIAL_ADMIN_PASSWORD"] = "testpass123"
os.environ["INITIAL_ADMIN_USERNAME"] = "admin"

import pytest
from httpx import ASGITransport, AsyncClient

from arena.models.base import async_session_factory, reset_db
from web.api.main import app


@pytest.fixture(autouse=True)
async def _reset_db():
    """Fresh tables for every test (ASGI lifespan doesn't run with httpx)."""
    await reset_db()


@pytest.fixture
async def client():
    """Async HTTP client for testing the API."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
async def db():
    """Database session for service-level tests."""
    async with async_session_factory() as session:
        yield session


@pytest.fixture
async def auth_headers(client):
    """Login as the bootstrap admin and return Authorization headers."""
    r = await client.post(
        "/account/login",
        json={"rUsername": "admin", "rPassword": "testpass123"},
    )
    assert r.status_code == 200, f"Login failed: {r.text}"
    token = r.json()["data"]["access_token"]
    return {"Authorization": f"Bearer {token}"}


def player_fields(nickname: str, **overrides) -> dict:
    """Valid registration body for a nickname."""
    fields = {
        "nickname": nickname,
        "name": "Alex",
        "lastname": "Martin",
        "email": f"{nickname.lower()}@arena.test",
        "age": 25,
        "phone": "0612345678",
        "region": "Paris",
    }
    fields.update(overrides)
    return fields


@pytest.fixture
def register(client):
    """Register players through the API: await register("a", "b")."""

    async def _register(*nicknames):
        for nickname in nicknames:
            r = await client.post("/players/add", json=player_fields(nickname))
            assert r.status_code == 201, r.text

    return _register


@pytest.fixture
def player_body():
    """Factory for valid registration bodies: player_body("alex", age=30)."""
    return player_fields
