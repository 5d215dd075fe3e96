"""Tests for registration, login and bearer-token resolution."""
from datetime import datetime, timedelta, timezone

import jwt

from planpact.config import settings
from tests.conftest import auth_headers, register_user


class TestRegister:
    def test_register_returns_token_and_user(self, api):
        data = register_user(api, name="Alice", email="Alice@Example.com")
        assert data["token"]
        assert data["user"]["name"] == "Alice"
        assert data["user"]["email"] == "alice@example.com"
        assert data["user"]["is_active"] is True
        assert "password_hash" not in data["user"]

    def test_duplicate_email_rejected(self, api):
        register_user(api, email="alice@example.com")
        resp = api.post("/api/auth/register", json={
            "name": "Other Alice",
            "email": " ALICE@example.com ",
            "password": "another1",
        })
        assert resp.status_code == 400
        assert resp.json()["detail"] == "User with this email already exists"

    def test_missing_fields_rejected(self, client):
        resp = client.post("/api/auth/register", json={"email": "x@example.com"})
        assert resp.status_code == 400

    def test_token_identifies_user(self, client):
        data = register_user(client)
        resp = client.get("/api/users/me", headers=auth_headers(data["token"]))
        assert resp.status_code == 200
        assert resp.json()["user_id"] == data["user"]["user_id"]


class TestLogin:
    def test_login_success(self, api):
        register_user(api, email="alice@example.com", password="secret123")
        resp = api.post("/api/auth/login", json={"email": "ALICE@example.com", "password": "secret123"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["token"]
        assert body["user"]["last_login"] is not None

    def test_wrong_password(self, client):
        register_user(client, password="secret123")
        resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "nope"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password"

    def test_unknown_email_gives_same_error(self, client):
        resp = client.post("/api/auth/login", json={"email": "ghost@example.com", "password": "x"})
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid email or password"

    def test_deactivated_user_cannot_login(self, client):
        data = register_user(client)
        client.delete("/api/users/me", headers=auth_headers(data["token"]))
        resp = client.post("/api/auth/login", json={"email": "alice@example.com", "password": "secret123"})
        assert resp.status_code == 401


class TestBearerToken:
    def test_missing_token(self, client):
        resp = client.get("/api/pacts")
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Authentication required: No token provided."

    def test_garbage_token(self, client):
        resp = client.get("/api/pacts", headers=auth_headers("not-a-jwt"))
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid or expired token"

    def test_expired_token(self, client):
        data = register_user(client)
        past = datetime.now(timezone.utc) - timedelta(days=2)
        token = jwt.encode(
            {"sub": data["user"]["user_id"], "iat": past, "exp": past + timedelta(hours=1)},
            settings.JWT_SECRET,
            algorithm=settings.JWT_ALGORITHM,
        )
        resp = client.get("/api/pacts", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_token_signed_with_other_secret(self, client):
        data = register_user(client)
        token = jwt.encode(
            {"sub": data["user"]["user_id"], "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            "some-other-secret",
            algorithm="HS256",
        )
        resp = client.get("/api/pacts", headers=auth_headers(token))
        assert resp.status_code == 401

    def test_token_of_deactivated_user_rejected(self, client):
        data = register_user(client)
        headers = auth_headers(data["token"])
        assert client.delete("/api/users/me", headers=headers).status_code == 200
        assert client.get("/api/users/me", headers=headers).status_code == 401


class TestPasswordLength:
    def test_multibyte_password_over_limit_rejected(self, api):
        # 60 characters but 120 bytes in UTF-8.
        resp = api.post("/api/auth/register", json={
            "name": "Élodie",
            "email": "elodie@example.com",
            "password": "é" * 60,
        })
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Password cannot be longer than 72 bytes"

    def test_multibyte_password_within_limit_accepted(self, client):
        register_user(client, email="elodie@example.com", password="é" * 36)
        resp = client.post("/api/auth/login", json={"email": "elodie@example.com", "password": "é" * 36})
        assert resp.status_code == 200
