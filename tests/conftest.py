"""
Shared test fixtures for the Storefront test suite.

The app runs against in-memory backends: an ``InMemoryKeyValueStore``, the
local identity provider on top of it, and object storage in a tmp dir.
"""

import os
import sys
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone

import pytest

# Ensure project root is importable
ROOT_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

# Override environment BEFORE importing application modules
os.environ["KV_BACKEND"] = "memory"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-the-storefront-suite"
os.environ["CORS_ORIGINS"] = "*"

from httpx import ASGITransport, AsyncClient  # noqa: E402

from storefront.api.v1.deps import (get_clock, get_identity_provider,  # noqa: E402
                                    get_object_storage, get_store)
from storefront.db.kv import InMemoryKeyValueStore  # noqa: E402
from storefront.main import app  # noqa: E402
from storefront.services.identity import LocalIdentityProvider  # noqa: E402
from storefront.services.storage import LocalObjectStorage  # noqa: E402

API = "/api/v1"


class FrozenClock:
    """Callable clock that only moves when told to."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 5, 1, 10, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def store() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def identity_provider(store) -> LocalIdentityProvider:
    return LocalIdentityProvider(store)


@pytest.fixture
async def object_storage(tmp_path) -> LocalObjectStorage:
    storage = LocalObjectStorage(tmp_path / "storage", url_prefix=f"{API}/storage")
    await storage.ensure_bucket("products")
    await storage.ensure_bucket("profiles")
    return storage


@pytest.fixture
async def async_client(
    store, identity_provider, object_storage, clock
) -> AsyncGenerator[AsyncClient, None]:
    """Return a httpx AsyncClient wired to the app with in-memory backends."""
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_identity_provider] = lambda: identity_provider
    app.dependency_overrides[get_object_storage] = lambda: object_storage
    app.dependency_overrides[get_clock] = lambda: clock

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(async_client: AsyncClient):
    """Factory: register + log in a user with ``role``; returns (headers, user_id)."""
    counter = {"n": 0}

    async def _make(role: str, email: str | None = None, name: str | None = None):
        counter["n"] += 1
        email = email or f"{role}{counter['n']}@example.com"
        resp = await async_client.post(
            f"{API}/auth/register",
            json={
                "email": email,
                "password": "s3cret-pass",
                "name": name or f"{role.title()} {counter['n']}",
                "role": role,
            },
        )
        assert resp.status_code == 200, resp.text

        login = await async_client.post(
            f"{API}/auth/login", json={"email": email, "password": "s3cret-pass"}
        )
        assert login.status_code == 200, login.text
        token = login.json()["access_token"]
        # Keep every request header-authenticated, not cookie-authenticated
        async_client.cookies.clear()
        return {"Authorization": f"Bearer {token}"}, resp.json()["userId"]

    return _make
