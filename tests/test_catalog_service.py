"""Tests for catalog index maintenance."""

import pytest

from storefront.db.kv import InMemoryKeyValueStore
from storefront.schemas.product import ProductCreate
from storefront.services.catalog import INDEX_KEY, CatalogService


def _product(name: str) -> ProductCreate:
    return ProductCreate(name=name, price=1.0)


@pytest.mark.asyncio
async def test_index_tracks_create_and_delete(clock):
    store = InMemoryKeyValueStore()
    catalog = CatalogService(store, clock)
    a = await catalog.create(_product("A"), created_by="u1")
    b = await catalog.create(_product("B"), created_by="u1")
    assert await store.get(INDEX_KEY) == [a["id"], b["id"]]

    await catalog.delete(a["id"])
    assert await store.get(INDEX_KEY) == [b["id"]]
    assert [p["name"] for p in await catalog.list()] == ["B"]


@pytest.mark.asyncio
async def test_list_skips_dangling_ids(clock):
    store = InMemoryKeyValueStore()
    catalog = CatalogService(store, clock)
    a = await catalog.create(_product("A"), created_by="u1")
    await store.set(INDEX_KEY, ["ghost", a["id"]])
    assert [p["id"] for p in await catalog.list()] == [a["id"]]


@pytest.mark.asyncio
async def test_reconcile_repairs_drift(clock):
    store = InMemoryKeyValueStore()
    catalog = CatalogService(store, clock)
    first = await catalog.create(_product("First"), created_by="u1")
    clock.advance(minutes=1)
    second = await catalog.create(_product("Second"), created_by="u1")
    clock.advance(minutes=1)
    third = await catalog.create(_product("Third"), created_by="u1")

    # Simulate a lost index update plus a dangling id
    await store.set(INDEX_KEY, [third["id"], "ghost", third["id"]])

    rebuilt = await catalog.reconcile_index()
    assert rebuilt == [third["id"], first["id"], second["id"]]
    assert await store.get(INDEX_KEY) == rebuilt


@pytest.mark.asyncio
async def test_reconcile_on_consistent_index_is_noop(clock):
    store = InMemoryKeyValueStore()
    catalog = CatalogService(store, clock)
    a = await catalog.create(_product("A"), created_by="u1")
    assert await catalog.reconcile_index() == [a["id"]]


@pytest.mark.asyncio
async def test_reconcile_empty_store():
    assert await CatalogService(InMemoryKeyValueStore()).reconcile_index() == []
