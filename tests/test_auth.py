"""
Authentication tests: register / login endpoints, the bearer-token gate
in front of the resource routers, and the token / password primitives.
"""
from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import jwt

from article_api.config import settings
from article_api.models import User
from article_api.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)
from article_api.exceptions import AuthenticationFailure

TEST_PASSWORD = "secret123"  # matches the ``user`` fixture


# ---------------------------------------------------------------------------
# Register
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_register_returns_user_and_token(async_client: AsyncClient):
    resp = await async_client.post("/api/register", json={
        "name": "Alice",
        "email": "alice@example.com",
        "password": "hunter22",
    })
    assert resp.status_code == 201
    body = resp.json()
    assert body["message"] == "User registered successfully"
    data = body["data"]
    assert data["token_type"] == "bearer"
    assert data["expires_in"] == settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60
    assert data["user"]["email"] == "alice@example.com"
    assert "password" not in data["user"]

    # The issued token opens the protected routes.
    resp = await async_client.get(
        "/api/categories",
        headers={"Authorization": f"Bearer {data['access_token']}"},
    )
    assert resp.status_code == 200


@pytest.mark.asyncio
async def test_register_duplicate_email(async_client: AsyncClient, user: User):
    resp = await async_client.post("/api/register", json={
        "name": "Someone Else",
        "email": user.email,
        "password": "another-pass",
    })
    assert resp.status_code == 422
    assert resp.json()["errors"]["email"] == ["The email has already been taken."]


@pytest.mark.asyncio
async def test_register_validation_errors(async_client: AsyncClient):
    resp = await async_client.post("/api/register", json={
        "email": "not-an-email",
        "password": "123",
    })
    assert resp.status_code == 422
    body = resp.json()
    assert body["message"] == "Validation error"
    assert body["errors"]["name"] == ["The name field is required."]
    assert body["errors"]["email"] == ["The email field must be a valid email address."]
    assert body["errors"]["password"] == ["The password field must be at least 6 characters."]


@pytest.mark.asyncio
async def test_register_without_body(async_client: AsyncClient):
    resp = await async_client.post("/api/register")
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"name", "email", "password"}


# ---------------------------------------------------------------------------
# Login
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_login_success(async_client: AsyncClient, user: User):
    resp = await async_client.post("/api/login", json={
        "email": user.email,
        "password": TEST_PASSWORD,
    })
    assert resp.status_code == 200
    token = resp.json()["data"]["access_token"]
    assert decode_access_token(token) == user.id


@pytest.mark.asyncio
async def test_login_wrong_password(async_client: AsyncClient, user: User):
    resp = await async_client.post("/api/login", json={
        "email": user.email,
        "password": "wrong-password",
    })
    assert resp.status_code == 401
    assert resp.json() == {"message": "Invalid credentials"}


@pytest.mark.asyncio
async def test_login_unknown_email(async_client: AsyncClient):
    resp = await async_client.post("/api/login", json={
        "email": "nobody@example.com",
        "password": TEST_PASSWORD,
    })
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_login_missing_fields(async_client: AsyncClient):
    resp = await async_client.post("/api/login", json={})
    assert resp.status_code == 422
    assert set(resp.json()["errors"]) == {"email", "password"}


# ---------------------------------------------------------------------------
# Auth gate
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
@pytest.mark.parametrize("method, path", [
    ("GET", "/api/categories"),
    ("POST", "/api/categories"),
    ("PUT", "/api/categories/1"),
    ("DELETE", "/api/categories/1"),
    ("GET", "/api/articles"),
    ("POST", "/api/articles"),
    ("GET", "/api/articles/1"),
    ("PUT", "/api/articles/1"),
    ("DELETE", "/api/articles/1"),
])
async def test_protected_routes_require_token(async_client: AsyncClient, method: str, path: str):
    resp = await async_client.request(method, path, json={})
    assert resp.status_code == 401
    assert resp.json() == {"message": "Unauthenticated."}
    assert resp.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_garbage_token_rejected(async_client: AsyncClient):
    resp = await async_client.get(
        "/api/categories", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_expired_token_rejected(async_client: AsyncClient, user: User):
    token = create_access_token(user.id, expires_delta=timedelta(minutes=-5))
    resp = await async_client.get(
        "/api/categories", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_unknown_user_rejected(async_client: AsyncClient):
    token = create_access_token(424242)
    resp = await async_client.get(
        "/api/articles", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


@pytest.mark.asyncio
async def test_token_for_deleted_user_rejected(async_client: AsyncClient, db_session, user: User):
    db_user = await db_session.get(User, user.id)
    db_user.deleted_at = db_user.created_at
    await db_session.commit()

    token = create_access_token(user.id)
    resp = await async_client.get(
        "/api/articles", headers={"Authorization": f"Bearer {token}"}
    )
    assert resp.status_code == 401


# ---------------------------------------------------------------------------
# Primitives
# ---------------------------------------------------------------------------

@pytest.mark.asyncio
async def test_password_hash_roundtrip():
    hashed = hash_password("s3cret!")
    assert hashed != "s3cret!"
    assert verify_password("s3cret!", hashed)
    assert not verify_password("other", hashed)


@pytest.mark.asyncio
async def test_verify_password_rejects_non_bcrypt_value():
    assert verify_password("anything", "plain-text") is False


@pytest.mark.asyncio
async def test_access_token_claims():
    token = create_access_token(7)
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    assert payload["sub"] == "7"
    assert payload["type"] == "access"
    assert {"exp", "iat", "jti"} <= payload.keys()


@pytest.mark.asyncio
async def test_decode_rejects_wrong_token_type():
    token = jwt.encode(
        {"sub": "1", "type": "refresh"}, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM
    )
    with pytest.raises(AuthenticationFailure):
        decode_access_token(token)


@pytest.mark.asyncio
async def test_decode_rejects_foreign_signature():
    token = jwt.encode({"sub": "1", "type": "access"}, "someone-else", algorithm="HS256")
    with pytest.raises(AuthenticationFailure):
        decode_access_token(token)
