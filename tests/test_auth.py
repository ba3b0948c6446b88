"""Tests for registration, login, refresh and the current-user endpoint."""

import pytest
from httpx import AsyncClient

API = "/api/v1"


@pytest.mark.asyncio
async def test_register_creates_user_record(async_client: AsyncClient, store):
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "Alice@Example.com",
        "password": "pw-123456",
        "name": "Alice",
        "role": "customer",
    })
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    user_id = data["userId"]

    record = await store.get(f"user:{user_id}")
    assert record["email"] == "alice@example.com"
    assert record["role"] == "customer"
    assert record["profilePhoto"] is None
    assert await store.get("user:email:alice@example.com") == user_id


@pytest.mark.asyncio
async def test_register_missing_fields(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/register", json={"email": "x@example.com"})
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing required fields"}


@pytest.mark.asyncio
async def test_register_unknown_role_rejected(async_client: AsyncClient):
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "x@example.com", "password": "pw", "name": "X", "role": "admin",
    })
    assert resp.status_code == 400
    assert "Role must be one of" in resp.json()["error"]


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client: AsyncClient, make_user):
    await make_user("customer", email="dup@example.com")
    resp = await async_client.post(f"{API}/auth/register", json={
        "email": "dup@example.com", "password": "pw", "name": "Again", "role": "customer",
    })
    assert resp.status_code == 400
    assert resp.json()["error"].startswith("Registration error:")


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, make_user):
    await make_user("customer", email="bob@example.com")
    resp = await async_client.post(
        f"{API}/auth/login", json={"email": "bob@example.com", "password": "nope"}
    )
    assert resp.status_code == 401
    assert "error" in resp.json()


@pytest.mark.asyncio
async def test_login_sets_httponly_cookies(async_client: AsyncClient, make_user):
    await make_user("customer", email="cookie@example.com")
    resp = await async_client.post(
        f"{API}/auth/login", json={"email": "cookie@example.com", "password": "s3cret-pass"}
    )
    assert resp.status_code == 200
    assert "access_token" in resp.cookies
    assert "refresh_token" in resp.cookies
    set_cookie = resp.headers.get("set-cookie")
    assert "HttpOnly" in set_cookie
    assert "SameSite=lax" in set_cookie


@pytest.mark.asyncio
async def test_current_user(async_client: AsyncClient, make_user):
    headers, user_id = await make_user("member", name="Mia")
    resp = await async_client.get(f"{API}/auth/user", headers=headers)
    assert resp.status_code == 200
    user = resp.json()["user"]
    assert user["id"] == user_id
    assert user["name"] == "Mia"
    assert user["role"] == "member"
    assert "createdAt" in user


@pytest.mark.asyncio
async def test_current_user_requires_token(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/auth/user")
    assert resp.status_code == 401

    resp = await async_client.get(
        f"{API}/auth/user", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


@pytest.mark.asyncio
async def test_refresh_issues_new_access_token(async_client: AsyncClient, make_user):
    await make_user("customer", email="fresh@example.com")
    login = await async_client.post(
        f"{API}/auth/login", json={"email": "fresh@example.com", "password": "s3cret-pass"}
    )
    async_client.cookies.clear()

    resp = await async_client.post(
        f"{API}/auth/refresh", json={"refresh_token": login.json()["refresh_token"]}
    )
    assert resp.status_code == 200
    async_client.cookies.clear()

    me = await async_client.get(
        f"{API}/auth/user",
        headers={"Authorization": f"Bearer {resp.json()['access_token']}"},
    )
    assert me.status_code == 200


@pytest.mark.asyncio
async def test_refresh_rejects_access_token(async_client: AsyncClient, make_user):
    headers, _ = await make_user("customer")
    access = headers["Authorization"].split(" ")[1]
    resp = await async_client.post(f"{API}/auth/refresh", json={"refresh_token": access})
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_health(async_client: AsyncClient):
    resp = await async_client.get(f"{API}/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "store": True}
    assert "x-request-id" in resp.headers
