"""
Tests for account endpoints: registration, login, the current user,
password resets and the musician profile.
"""

from __future__ import annotations

from fastapi import status

from api.security import create_access_token, create_reset_token
from shared.config import get_config


def test_register_creates_user_and_musician(client):
    response = client.post(
        "/auth/register",
        json={"email": "band@example.com", "password": "secret123", "name": "The Band"},
    )

    assert response.status_code == status.HTTP_201_CREATED
    data = response.json()
    assert data["message"] == "User registered successfully"
    assert data["token"]
    user = data["user"]
    assert user["email"] == "band@example.com"
    assert user["name"] == "The Band"
    assert "passwordHash" not in user
    assert "password_hash" not in user
    assert user["musician"]["stageName"] == "The Band"
    assert user["musician"]["userId"] == user["id"]


def test_register_duplicate_email_returns_400(client, register):
    register(email="dup@example.com")

    response = client.post(
        "/auth/register",
        json={"email": "dup@example.com", "password": "another1", "name": "Copycat"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "User already exists"}


def test_register_validation_errors(client):
    response = client.post(
        "/auth/register",
        json={"email": "not-an-email", "password": "123", "name": "  "},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    data = response.json()
    assert data["message"] == "Validation failed"
    messages = {e["field"]: e["message"] for e in data["errors"]}
    assert messages["email"] == "Please enter a valid email"
    assert messages["password"] == "Password must be at least 6 characters"
    assert messages["name"] == "Name is required"


def test_login_success(client, register):
    register(email="login@example.com", password="secret123")

    response = client.post(
        "/auth/login",
        json={"email": "login@example.com", "password": "secret123"},
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["message"] == "Login successful"
    assert data["token"]
    assert data["user"]["musician"] is not None


def test_login_wrong_password_and_unknown_email_fail_identically(client, register):
    register(email="login@example.com", password="secret123")

    wrong_password = client.post(
        "/auth/login",
        json={"email": "login@example.com", "password": "wrong-password"},
    )
    unknown_email = client.post(
        "/auth/login",
        json={"email": "nobody@example.com", "password": "secret123"},
    )

    assert wrong_password.status_code == status.HTTP_401_UNAUTHORIZED
    assert unknown_email.status_code == status.HTTP_401_UNAUTHORIZED
    assert wrong_password.json() == unknown_email.json() == {"message": "Invalid credentials"}


def test_me_requires_token(client):
    response = client.get("/auth/me")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Authentication required"}
    assert response.headers["www-authenticate"] == "Bearer"


def test_me_rejects_invalid_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"message": "Invalid or expired token"}


def test_me_returns_current_user(client, musician):
    response = client.get("/auth/me", headers=musician["headers"])

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["id"] == musician["user"]["id"]
    assert data["musician"]["id"] == musician["musician_id"]


def test_reset_token_is_not_an_access_token(client, musician):
    reset_token = create_reset_token(musician["user"]["id"])

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {reset_token}"})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_password_reset_flow(client, register):
    register(email="reset@example.com", password="old-password")

    forgot = client.post("/auth/forgot-password", json={"email": "reset@example.com"})
    assert forgot.status_code == status.HTTP_200_OK
    reset_token = forgot.json()["resetToken"]
    assert reset_token

    reset = client.post(
        "/auth/reset-password",
        json={"token": reset_token, "password": "new-password"},
    )
    assert reset.status_code == status.HTTP_200_OK
    assert reset.json() == {"message": "Password reset successful"}

    old_login = client.post(
        "/auth/login", json={"email": "reset@example.com", "password": "old-password"}
    )
    new_login = client.post(
        "/auth/login", json={"email": "reset@example.com", "password": "new-password"}
    )
    assert old_login.status_code == status.HTTP_401_UNAUTHORIZED
    assert new_login.status_code == status.HTTP_200_OK


def test_forgot_password_unknown_email_gives_same_message(client, register):
    register(email="known@example.com")

    known = client.post("/auth/forgot-password", json={"email": "known@example.com"})
    unknown = client.post("/auth/forgot-password", json={"email": "unknown@example.com"})

    assert known.status_code == unknown.status_code == status.HTTP_200_OK
    assert known.json()["message"] == unknown.json()["message"]
    assert unknown.json()["resetToken"] is None


def test_reset_password_rejects_access_token(client, musician):
    response = client.post(
        "/auth/reset-password",
        json={"token": musician["token"], "password": "new-password"},
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"message": "Invalid or expired reset token"}


def test_token_for_deleted_user_returns_404_on_me(client, musician):
    config = get_config()
    token = create_access_token(
        "00000000-0000-0000-0000-000000000000",
        musician["musician_id"],
        config,
    )

    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json() == {"message": "User not found"}


def test_get_and_update_musician_profile(client, musician):
    response = client.put(
        "/musicians/me",
        json={"bio": "Loud guitars", "location": "Berlin"},
        headers=musician["headers"],
    )

    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["bio"] == "Loud guitars"
    assert data["location"] == "Berlin"
    assert data["stageName"] == "Test Band"

    fetched = client.get("/musicians/me", headers=musician["headers"]).json()
    assert fetched["bio"] == "Loud guitars"
    assert fetched["website"] is None


def test_update_musician_rejects_empty_stage_name(client, musician):
    response = client.put(
        "/musicians/me",
        json={"stageName": ""},
        headers=musician["headers"],
    )

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["errors"][0]["message"] == "Stage name cannot be empty"
