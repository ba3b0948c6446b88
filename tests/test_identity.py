"""Tests for the local identity provider and object storage."""

import pytest

from storefront.db.kv import InMemoryKeyValueStore
from storefront.services.identity import IdentityError, LocalIdentityProvider
from storefront.services.storage import LocalObjectStorage, StorageError


@pytest.mark.asyncio
async def test_sign_in_round_trip():
    store = InMemoryKeyValueStore()
    provider = LocalIdentityProvider(store)
    identity = await provider.create_user("Eve@Example.com", "pw-1", {"role": "customer"})
    assert identity.email == "eve@example.com"

    tokens = await provider.sign_in("eve@example.com", "pw-1")
    resolved = await provider.get_user(tokens.access_token)
    assert resolved is not None
    assert resolved.id == identity.id
    assert resolved.metadata == {"role": "customer"}

    # refresh tokens are not access tokens
    assert await provider.get_user(tokens.refresh_token) is None


@pytest.mark.asyncio
async def test_password_is_hashed_and_hidden_from_user_scans():
    store = InMemoryKeyValueStore()
    provider = LocalIdentityProvider(store)
    await provider.create_user("eve@example.com", "pw-1")

    record = await store.get("identity:eve@example.com")
    assert record["hashedPassword"] != "pw-1"
    assert await store.get_by_prefix("user:") == []


@pytest.mark.asyncio
async def test_identity_errors():
    provider = LocalIdentityProvider(InMemoryKeyValueStore())
    await provider.create_user("eve@example.com", "pw-1")

    with pytest.raises(IdentityError):
        await provider.create_user("EVE@example.com", "other")
    with pytest.raises(IdentityError):
        await provider.sign_in("eve@example.com", "wrong")
    with pytest.raises(IdentityError):
        await provider.sign_in("nobody@example.com", "pw-1")
    with pytest.raises(IdentityError):
        await provider.refresh("garbage")


@pytest.mark.asyncio
async def test_storage_requires_bucket_and_upsert(tmp_path):
    storage = LocalObjectStorage(tmp_path, url_prefix="/api/v1/storage")
    with pytest.raises(StorageError):
        await storage.upload("profiles", "u1/a.png", b"x")

    await storage.ensure_bucket("profiles")
    await storage.upload("profiles", "u1/a.png", b"x")
    with pytest.raises(StorageError):
        await storage.upload("profiles", "u1/a.png", b"y")
    await storage.upload("profiles", "u1/a.png", b"y", upsert=True)

    url = await storage.create_signed_url("profiles", "u1/a.png", expires_in=60)
    token = url.split("token=")[1]
    path = await storage.open("profiles", "u1/a.png", token)
    assert path.read_bytes() == b"y"

    with pytest.raises(StorageError):
        await storage.upload("profiles", "../outside.png", b"z", upsert=True)
