"""Tests for the per-user cart."""

import pytest
from httpx import AsyncClient

from storefront.db.kv import InMemoryKeyValueStore
from storefront.services.cart import CartService

API = "/api/v1"


@pytest.mark.asyncio
async def test_empty_cart_is_not_persisted(async_client: AsyncClient, make_user, store):
    headers, user_id = await make_user("customer")
    resp = await async_client.get(f"{API}/cart", headers=headers)
    assert resp.status_code == 200
    assert resp.json() == {"cart": {"items": []}}
    assert await store.get(f"cart:{user_id}") is None


@pytest.mark.asyncio
async def test_adding_same_product_twice_sums_quantity(async_client: AsyncClient, make_user):
    headers, _ = await make_user("customer")
    await async_client.post(f"{API}/cart", json={"productId": "p-1", "quantity": 2}, headers=headers)
    resp = await async_client.post(
        f"{API}/cart", json={"productId": "p-1", "quantity": 3}, headers=headers
    )
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert len(body["cart"]["items"]) == 1
    assert body["cart"]["items"][0]["productId"] == "p-1"
    assert body["cart"]["items"][0]["quantity"] == 5


@pytest.mark.asyncio
async def test_quantity_must_be_positive(async_client: AsyncClient, make_user):
    headers, _ = await make_user("customer")
    resp = await async_client.post(
        f"{API}/cart", json={"productId": "p-1", "quantity": 0}, headers=headers
    )
    assert resp.status_code == 400
    assert "quantity" in resp.json()["error"]


@pytest.mark.asyncio
async def test_remove_absent_product_is_noop(async_client: AsyncClient, make_user):
    headers, _ = await make_user("customer")
    await async_client.post(f"{API}/cart", json={"productId": "p-1", "quantity": 1}, headers=headers)

    resp = await async_client.delete(f"{API}/cart/not-in-cart", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True
    assert [i["productId"] for i in resp.json()["cart"]["items"]] == ["p-1"]


@pytest.mark.asyncio
async def test_remove_and_clear(async_client: AsyncClient, make_user):
    headers, _ = await make_user("customer")
    for pid in ("p-1", "p-2"):
        await async_client.post(f"{API}/cart", json={"productId": pid, "quantity": 1}, headers=headers)

    resp = await async_client.delete(f"{API}/cart/p-1", headers=headers)
    assert [i["productId"] for i in resp.json()["cart"]["items"]] == ["p-2"]

    resp = await async_client.delete(f"{API}/cart", headers=headers)
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = await async_client.get(f"{API}/cart", headers=headers)
    assert resp.json()["cart"]["items"] == []


@pytest.mark.asyncio
async def test_carts_are_per_user(async_client: AsyncClient, make_user):
    alice, _ = await make_user("customer")
    bob, _ = await make_user("customer")
    await async_client.post(f"{API}/cart", json={"productId": "p-1", "quantity": 1}, headers=alice)

    resp = await async_client.get(f"{API}/cart", headers=bob)
    assert resp.json()["cart"]["items"] == []


@pytest.mark.asyncio
async def test_cart_requires_authentication(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/cart")
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_added_at_is_kept_on_merge(clock):
    carts = CartService(InMemoryKeyValueStore(), clock)
    await carts.add("u1", "p-1", 1)
    clock.advance(minutes=5)
    cart = await carts.add("u1", "p-1", 1)
    assert cart["items"] == [
        {"productId": "p-1", "quantity": 2, "addedAt": "2024-05-01T10:00:00.000Z"}
    ]
