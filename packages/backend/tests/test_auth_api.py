"""Auth API tests.

Learn: Tests cover:
1. Registration + validation + duplicate prevention
2. Login → session token, generic failure message
3. /auth/me with valid, logged-out and never-issued tokens
4. Logout idempotency
"""

import uuid

import pytest

from conftest import register


def _email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


# ═══════════════════════════════════════════════════════════
# Registration
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_register_user(client):
    """Register returns the public user and a session token."""
    email = _email("test")
    r = await client.post(
        "/auth/register",
        json={"email": email, "username": "Test User", "password": "secure_password_123"},
    )
    assert r.status_code == 201
    body = r.json()
    user = body["user"]
    assert user["email"] == email
    assert user["username"] == "Test User"
    assert "id" in user
    assert "createdAt" in user
    assert "passwordHash" not in user
    assert "password_hash" not in user
    assert body["token"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client):
    """Can't register with the same email twice."""
    body = {"email": _email("dup"), "username": "User 1", "password": "password_123"}

    r1 = await client.post("/auth/register", json=body)
    assert r1.status_code == 201

    r2 = await client.post("/auth/register", json={**body, "username": "User 2"})
    assert r2.status_code == 409
    assert r2.json() == {"error": "Email already registered"}


@pytest.mark.asyncio
async def test_register_duplicate_email_ignores_case(client):
    email = _email("case")
    r1 = await client.post(
        "/auth/register",
        json={"email": email, "username": "a", "password": "password_123"},
    )
    assert r1.status_code == 201

    r2 = await client.post(
        "/auth/register",
        json={"email": email.upper(), "username": "b", "password": "password_123"},
    )
    assert r2.status_code == 409


@pytest.mark.asyncio
async def test_register_short_password(client):
    """Password must be at least 8 characters."""
    r = await client.post(
        "/auth/register",
        json={"email": _email("short"), "username": "Short", "password": "abc"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Password must be at least 8 characters"}


@pytest.mark.asyncio
async def test_register_invalid_email(client):
    r = await client.post(
        "/auth/register",
        json={"email": "not-an-email", "username": "x", "password": "password_123"},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Invalid email format"}


@pytest.mark.asyncio
@pytest.mark.parametrize("missing", ["email", "username", "password"])
async def test_register_missing_field(client, missing):
    body = {"email": _email(), "username": "x", "password": "password_123"}
    del body[missing]
    r = await client.post("/auth/register", json=body)
    assert r.status_code == 400
    assert "Missing required fields" in r.json()["error"]


# ═══════════════════════════════════════════════════════════
# Login
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_login_success(client):
    email = _email("login")
    await client.post(
        "/auth/register",
        json={"email": email, "username": "Login User", "password": "my_password_123"},
    )

    r = await client.post(
        "/auth/login", json={"email": email, "password": "my_password_123"}
    )
    assert r.status_code == 200
    body = r.json()
    assert body["user"]["email"] == email
    assert body["token"]


@pytest.mark.asyncio
async def test_login_does_not_invalidate_other_sessions(client):
    email = _email("multi")
    r1 = await client.post(
        "/auth/register",
        json={"email": email, "username": "Multi", "password": "my_password_123"},
    )
    first_token = r1.json()["token"]

    r2 = await client.post(
        "/auth/login", json={"email": email, "password": "my_password_123"}
    )
    second_token = r2.json()["token"]
    assert first_token != second_token

    for token in (first_token, second_token):
        me = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 200


@pytest.mark.asyncio
async def test_login_failures_share_one_message(client):
    """Wrong password and unknown email are indistinguishable."""
    email = _email("wrong")
    await client.post(
        "/auth/register",
        json={"email": email, "username": "User", "password": "correct_password"},
    )

    wrong_pw = await client.post(
        "/auth/login", json={"email": email, "password": "wrong_password"}
    )
    unknown = await client.post(
        "/auth/login", json={"email": "nobody@example.com", "password": "wrong_password"}
    )

    assert wrong_pw.status_code == 401
    assert unknown.status_code == 401
    assert wrong_pw.json() == unknown.json() == {"error": "Invalid email or password"}


@pytest.mark.asyncio
async def test_login_missing_fields(client):
    r = await client.post("/auth/login", json={"email": "a@b.co"})
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields: email, password"}


# ═══════════════════════════════════════════════════════════
# Sessions
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_me_with_token(client):
    user, headers = await register(client, "carol")
    r = await client.get("/auth/me", headers=headers)
    assert r.status_code == 200
    body = r.json()
    assert body["user"] == user
    assert headers["Authorization"] == f"Bearer {body['token']}"


@pytest.mark.asyncio
async def test_me_without_token(client):
    r = await client.get("/auth/me")
    assert r.status_code == 401
    assert r.headers["WWW-Authenticate"] == "Bearer"
    assert r.json() == {"error": "Missing or invalid authorization header"}


@pytest.mark.asyncio
async def test_me_with_never_issued_token(client):
    r = await client.get("/auth/me", headers={"Authorization": "Bearer made-up-token"})
    assert r.status_code == 401
    assert r.json() == {"error": "Invalid or expired session"}


@pytest.mark.asyncio
async def test_logout_revokes_token(client):
    _, headers = await register(client, "dave")

    r = await client.post("/auth/logout", headers=headers)
    assert r.status_code == 200
    assert r.json() == {"message": "Logged out successfully"}

    me = await client.get("/auth/me", headers=headers)
    assert me.status_code == 401

    create = await client.post(
        "/articles",
        json={"title": "t", "content": "c", "category": "Tech"},
        headers=headers,
    )
    assert create.status_code == 401


@pytest.mark.asyncio
async def test_logout_never_fails(client):
    """No header, a stale token, or a repeat logout all succeed."""
    _, headers = await register(client, "erin")

    assert (await client.post("/auth/logout")).status_code == 200
    assert (await client.post("/auth/logout", headers=headers)).status_code == 200
    assert (await client.post("/auth/logout", headers=headers)).status_code == 200
    assert (
        await client.post("/auth/logout", headers={"Authorization": "Bearer nope"})
    ).status_code == 200
