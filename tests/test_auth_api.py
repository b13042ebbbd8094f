from datetime import datetime, timedelta, timezone

import jwt
import pytest

from autosathi.config import settings
from conftest import PASSWORD, bearer, register


@pytest.mark.asyncio
async def test_register_returns_user_and_token(client) -> None:
    data = await register(client, email="Rahul@Example.com")

    assert data["user"]["email"] == "rahul@example.com"
    assert "password_hash" not in data["user"]
    assert data["token"]

    profile = await client.get("/api/auth/profile", headers=bearer(data["token"]))
    assert profile.status_code == 200
    assert profile.json()["data"]["user"]["id"] == data["user"]["id"]


@pytest.mark.asyncio
async def test_register_duplicate_email(client) -> None:
    await register(client)
    response = await client.post(
        "/api/auth/register",
        json={"first_name": "Rahul", "last_name": "Sharma", "email": "rahul@example.com", "password": PASSWORD},
    )

    assert response.status_code == 409
    assert response.json() == {"success": False, "message": "Email already registered"}


@pytest.mark.asyncio
async def test_register_rejects_weak_password(client) -> None:
    response = await client.post(
        "/api/auth/register",
        json={"first_name": "Rahul", "last_name": "Sharma", "email": "rahul@example.com", "password": "secret1"},
    )

    body = response.json()
    assert response.status_code == 400
    assert body["message"] == "Validation failed"
    assert [e["field"] for e in body["errors"]] == ["password"]


@pytest.mark.asyncio
async def test_login(client) -> None:
    await register(client)

    ok = await client.post("/api/auth/login", json={"email": "RAHUL@example.com", "password": PASSWORD})
    assert ok.status_code == 200
    assert ok.json()["data"]["token"]

    wrong = await client.post("/api/auth/login", json={"email": "rahul@example.com", "password": "Wrong123"})
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Invalid credentials"

    unknown = await client.post("/api/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert unknown.status_code == 401
    assert unknown.json()["message"] == "Invalid credentials"


@pytest.mark.asyncio
async def test_missing_and_bad_tokens(client) -> None:
    missing = await client.get("/api/auth/profile")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Access token required"

    garbage = await client.get("/api/auth/profile", headers=bearer("not-a-token"))
    assert garbage.status_code == 401
    assert garbage.json()["message"] == "Invalid token"


@pytest.mark.asyncio
async def test_expired_token(client) -> None:
    data = await register(client)
    expired = jwt.encode(
        {"sub": data["user"]["id"], "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
        settings.jwt_secret,
        algorithm=settings.jwt_algorithm,
    )

    response = await client.get("/api/auth/profile", headers=bearer(expired))
    assert response.status_code == 401
    assert response.json()["message"] == "Token expired"


@pytest.mark.asyncio
async def test_update_profile(client, auth) -> None:
    response = await client.put(
        "/api/auth/profile",
        json={"first_name": "Rohan", "last_name": None, "phone": "+91 98765 43210"},
        headers=auth,
    )

    user = response.json()["data"]["user"]
    assert response.status_code == 200
    assert user["first_name"] == "Rohan"
    assert user["last_name"] == "Sharma"
    assert user["phone"] == "+91 98765 43210"


@pytest.mark.asyncio
async def test_change_password(client, auth) -> None:
    missing = await client.put("/api/auth/change-password", json={"new_password": "Other123"}, headers=auth)
    assert missing.status_code == 400

    short = await client.put(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "abc"},
        headers=auth,
    )
    assert short.status_code == 400

    wrong = await client.put(
        "/api/auth/change-password",
        json={"current_password": "Nope1234", "new_password": "Other123"},
        headers=auth,
    )
    assert wrong.status_code == 401
    assert wrong.json()["message"] == "Current password is incorrect"

    ok = await client.put(
        "/api/auth/change-password",
        json={"current_password": PASSWORD, "new_password": "Other123"},
        headers=auth,
    )
    assert ok.status_code == 200

    login = await client.post("/api/auth/login", json={"email": "rahul@example.com", "password": "Other123"})
    assert login.status_code == 200


@pytest.mark.asyncio
async def test_deactivated_account_is_locked_out(client) -> None:
    data = await register(client)
    headers = bearer(data["token"])

    response = await client.delete("/api/auth/profile", headers=headers)
    assert response.status_code == 200

    profile = await client.get("/api/auth/profile", headers=headers)
    assert profile.status_code == 401

    login = await client.post("/api/auth/login", json={"email": "rahul@example.com", "password": PASSWORD})
    assert login.status_code == 401
    assert login.json()["message"] == "Account is deactivated"
