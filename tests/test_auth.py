"""Tests for authentication and the token registry."""
from datetime import timedelta

import pytest
from sqlalchemy import select

from fieldops.core.exceptions import UnauthorizedError
from fieldops.models.token import AccessToken
from fieldops.models.user import UserStatus
from fieldops.services.auth_service import AuthService
from fieldops.utils.security import create_access_token, decode_token, verify_password
from fieldops.utils.time import utcnow

from conftest import PASSWORD


def test_password_hashing():
    """Test password hashing and verification."""
    password = "testpassword123"
    hashed = AuthService.hash_password(password)

    assert hashed != password
    assert verify_password(password, hashed)
    assert not verify_password("wrongpassword", hashed)


def test_jwt_token_creation():
    """Test JWT token creation and decoding."""
    token = create_access_token({"sub": "user123", "email": "test@example.com"})

    decoded = decode_token(token)
    assert decoded["sub"] == "user123"
    assert decoded["email"] == "test@example.com"
    assert decoded["type"] == "access"
    assert decoded["jti"]


def test_decode_rejects_tampered_token():
    token = create_access_token({"sub": "user123"})
    with pytest.raises(ValueError):
        decode_token(".".join(token.split(".")[:2] + ["not-a-signature"]))


@pytest.mark.asyncio
async def test_authenticate_user(db_session, employee):
    """Test user authentication."""
    user = await AuthService.authenticate_user(db_session, "employee@example.com", PASSWORD)
    assert user is not None
    assert user.email == "employee@example.com"

    assert await AuthService.authenticate_user(db_session, "employee@example.com", "wrongpassword") is None
    assert await AuthService.authenticate_user(db_session, "nonexistent@example.com", PASSWORD) is None


@pytest.mark.asyncio
async def test_login_returns_token_and_user(client, employee):
    response = await client.post(
        "/api/auth/login",
        json={"email": "employee@example.com", "password": PASSWORD, "device_name": "pixel"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["roles"] == ["employee"]
    assert "create own locations" in body["user"]["permissions"]
    assert body["user"]["last_login_at"] is not None


@pytest.mark.asyncio
async def test_login_wrong_password_is_field_error(client, employee):
    response = await client.post(
        "/api/auth/login",
        json={"email": "employee@example.com", "password": "nope-nope"},
    )
    assert response.status_code == 422
    assert response.json()["detail"] == {"email": ["The provided credentials are incorrect."]}


@pytest.mark.asyncio
async def test_inactive_user_cannot_login(client, db_session, employee):
    employee.status = UserStatus.INACTIVE
    await db_session.commit()

    response = await client.post(
        "/api/auth/login",
        json={"email": "employee@example.com", "password": PASSWORD},
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_creates_employee(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "New Hire",
            "email": "new@example.com",
            "password": "longenough",
            "password_confirmation": "longenough",
            "department": "Operations",
        },
    )
    assert response.status_code == 201
    body = response.json()
    assert body["user"]["roles"] == ["employee"]

    me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {body['access_token']}"})
    assert me.status_code == 200
    assert me.json()["email"] == "new@example.com"


@pytest.mark.asyncio
async def test_register_rejects_mismatched_confirmation(client):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "New Hire",
            "email": "new@example.com",
            "password": "longenough",
            "password_confirmation": "different",
        },
    )
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_register_duplicate_email(client, employee):
    response = await client.post(
        "/api/auth/register",
        json={
            "name": "Copy",
            "email": "employee@example.com",
            "password": "longenough",
            "password_confirmation": "longenough",
        },
    )
    assert response.status_code == 422
    assert "email" in response.json()["detail"]


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.get("/api/auth/me")
    assert response.status_code == 401
    assert response.headers["www-authenticate"] == "Bearer"


@pytest.mark.asyncio
async def test_unregistered_token_is_rejected(client, employee):
    # Correctly signed but never issued through the registry
    token = create_access_token({"sub": str(employee.id)})
    response = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_logout_revokes_only_current_token(client, db_session, employee):
    first = (await AuthService.issue_token(db_session, employee))["access_token"]
    second = (await AuthService.issue_token(db_session, employee))["access_token"]

    response = await client.post("/api/auth/logout", headers={"Authorization": f"Bearer {first}"})
    assert response.status_code == 200

    assert (await client.get("/api/auth/me", headers={"Authorization": f"Bearer {first}"})).status_code == 401
    assert (await client.get("/api/auth/me", headers={"Authorization": f"Bearer {second}"})).status_code == 200


@pytest.mark.asyncio
async def test_logout_all_revokes_every_token(client, db_session, employee):
    first = (await AuthService.issue_token(db_session, employee))["access_token"]
    second = (await AuthService.issue_token(db_session, employee))["access_token"]

    response = await client.post("/api/auth/logout-all", headers={"Authorization": f"Bearer {first}"})
    assert response.status_code == 200

    for token in (first, second):
        me = await client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert me.status_code == 401

    remaining = await db_session.execute(select(AccessToken).where(AccessToken.user_id == employee.id))
    assert remaining.scalars().all() == []


@pytest.mark.asyncio
async def test_refresh_replaces_token(client, db_session, employee):
    old = (await AuthService.issue_token(db_session, employee, name="tablet"))["access_token"]

    response = await client.post("/api/auth/refresh-token", headers={"Authorization": f"Bearer {old}"})
    assert response.status_code == 200
    new = response.json()["access_token"]
    assert new != old

    assert (await client.get("/api/auth/me", headers={"Authorization": f"Bearer {old}"})).status_code == 401
    assert (await client.get("/api/auth/me", headers={"Authorization": f"Bearer {new}"})).status_code == 200


@pytest.mark.asyncio
async def test_expired_registry_row_is_rejected(db_session, employee):
    token = (await AuthService.issue_token(db_session, employee))["access_token"]
    row = (await db_session.execute(select(AccessToken))).scalars().first()
    row.expires_at = utcnow() - timedelta(minutes=1)
    await db_session.commit()

    with pytest.raises(UnauthorizedError):
        await AuthService.resolve_token(db_session, token)


@pytest.mark.asyncio
async def test_resolve_token_stamps_last_used(db_session, employee):
    token = (await AuthService.issue_token(db_session, employee))["access_token"]
    user, row = await AuthService.resolve_token(db_session, token)
    assert user.id == employee.id
    assert row.last_used_at is not None


@pytest.mark.asyncio
async def test_deactivated_user_token_stops_working(client, db_session, employee, employee_headers):
    employee.status = UserStatus.INACTIVE
    await db_session.commit()

    response = await client.get("/api/auth/me", headers=employee_headers)
    assert response.status_code == 401
