"""End-to-end tests for the ``/api/v1/auth`` endpoints."""

from __future__ import annotations

import pytest

from tests.factories.account import DEFAULT_PASSWORD, AccountFactory

BASE = "/api/v1/auth"


def _bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def _signin(client, username, password=DEFAULT_PASSWORD):
    resp = client.post(f"{BASE}/signin", json={"username": username, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]


class TestSignup:
    def test_signup_returns_public_account(self, client):
        resp = client.post(
            f"{BASE}/signup",
            json={"username": "john_doe", "email": "John@X.com", "password": "secret1"},
        )
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["username"] == "john_doe"
        assert data["email"] == "john@x.com"
        assert data["roles"] == ["user"]
        assert data["authorities"] == ["ROLE_USER"]
        assert "password" not in data and "password_hash" not in data

    def test_requested_roles_ignored_by_default(self, client):
        resp = client.post(
            f"{BASE}/signup",
            json={"username": "sneaky", "email": "s@x.com", "password": "secret1",
                  "roles": ["admin"]},
        )
        assert resp.get_json()["data"]["roles"] == ["user"]

    def test_duplicate_is_conflict(self, client):
        AccountFactory(username="john_doe")
        resp = client.post(
            f"{BASE}/signup",
            json={"username": "john_doe", "email": "new@x.com", "password": "secret1"},
        )
        assert resp.status_code == 409
        body = resp.get_json()
        assert body["code"] == "duplicate_field"
        assert body["details"] == {"field": "username"}

    def test_invalid_input_is_unprocessable(self, client):
        resp = client.post(
            f"{BASE}/signup", json={"username": "j", "email": "nope", "password": "1"}
        )
        assert resp.status_code == 422
        errors = resp.get_json()["details"]["errors"]
        assert set(errors) == {"username", "email", "password"}

    def test_signup_accepts_profile_fields(self, client):
        resp = client.post(
            f"{BASE}/signup",
            json={
                "username": "jane_doe",
                "email": "jane@x.com",
                "password": "secret1",
                "first_name": "Jane",
                "last_name": "Doe",
                "date_of_birth": "1992-03-04",
            },
        )
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["first_name"] == "Jane"
        assert data["last_name"] == "Doe"
        assert data["date_of_birth"] == "1992-03-04"
        assert data["phone"] is None

    def test_signup_rejects_bad_date_of_birth(self, client):
        resp = client.post(
            f"{BASE}/signup",
            json={
                "username": "jane_doe",
                "email": "jane@x.com",
                "password": "secret1",
                "date_of_birth": "not-a-date",
            },
        )
        assert resp.status_code == 422

    def test_missing_field_is_unprocessable(self, client):
        resp = client.post(f"{BASE}/signup", json={"username": "john_doe"})
        assert resp.status_code == 422
        assert resp.mimetype == "application/problem+json"


class TestSigninAndSignout:
    def test_john_doe_flow(self, client):
        client.post(
            f"{BASE}/signup",
            json={"username": "john_doe", "email": "john@x.com", "password": "secret1"},
        )

        bad = client.post(f"{BASE}/signin", json={"username": "john_doe", "password": "wrong"})
        assert bad.status_code == 401
        assert bad.get_json()["code"] == "invalid_credentials"
        assert bad.headers["WWW-Authenticate"] == "Bearer"

        data = _signin(client, "john_doe", "secret1")
        assert data["token_type"] == "Bearer"
        assert data["authorities"] == ["ROLE_USER"]
        token = data["access_token"]

        assert client.get("/api/v1/users/me", headers=_bearer(token)).status_code == 200

        out = client.post(f"{BASE}/signout", headers=_bearer(token))
        assert out.status_code == 200

        denied = client.get("/api/v1/users/me", headers=_bearer(token))
        assert denied.status_code == 401
        assert denied.get_json()["code"] == "unauthorized"

    def test_unknown_user_looks_like_wrong_password(self, client):
        resp = client.post(f"{BASE}/signin", json={"username": "ghost", "password": "x"})
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_credentials"

    def test_suspended_account_cannot_sign_in(self, client):
        AccountFactory(username="sleepy", status="suspended")
        resp = client.post(
            f"{BASE}/signin", json={"username": "sleepy", "password": DEFAULT_PASSWORD}
        )
        assert resp.status_code == 403
        assert resp.get_json()["details"] == {"status": "suspended"}

    def test_signout_requires_token(self, client):
        assert client.post(f"{BASE}/signout").status_code == 401

    def test_signout_revokes_refresh_token(self, client):
        AccountFactory(username="alice")
        data = _signin(client, "alice")

        out = client.post(
            f"{BASE}/signout",
            headers=_bearer(data["access_token"]),
            json={"refresh_token": data["refresh_token"]},
        )
        assert out.status_code == 200

        resp = client.post(f"{BASE}/refresh", json={"refresh_token": data["refresh_token"]})
        assert resp.status_code == 401


class TestTokens:
    def test_refresh(self, client):
        AccountFactory(username="alice")
        data = _signin(client, "alice")

        resp = client.post(f"{BASE}/refresh", json={"refresh_token": data["refresh_token"]})
        assert resp.status_code == 200
        new_token = resp.get_json()["data"]["access_token"]
        assert client.get("/api/v1/users/me", headers=_bearer(new_token)).status_code == 200

    def test_refresh_with_access_token_is_rejected(self, client):
        AccountFactory(username="alice")
        data = _signin(client, "alice")
        resp = client.post(f"{BASE}/refresh", json={"refresh_token": data["access_token"]})
        assert resp.status_code == 401
        assert resp.get_json()["code"] == "invalid_token"

    def test_x_access_token_header(self, client):
        AccountFactory(username="alice")
        data = _signin(client, "alice")
        resp = client.get("/api/v1/users/me", headers={"x-access-token": data["access_token"]})
        assert resp.status_code == 200


class TestPasswordFlows:
    def test_forgot_and_reset(self, client):
        AccountFactory(username="alice", email="alice@example.com")

        forgot = client.post(f"{BASE}/forgot-password", json={"email": "alice@example.com"})
        assert forgot.status_code == 200
        reset_token = forgot.get_json()["data"]["reset_token"]

        reset = client.post(
            f"{BASE}/reset-password",
            json={"reset_token": reset_token, "new_password": "brand-new-pass"},
        )
        assert reset.status_code == 200

        again = client.post(
            f"{BASE}/reset-password",
            json={"reset_token": reset_token, "new_password": "another-pass"},
        )
        assert again.status_code == 401

        _signin(client, "alice", "brand-new-pass")

    def test_forgot_hides_token_when_not_exposed(self, app, client):
        AccountFactory(email="alice@example.com")
        app.config["AUTH_EXPOSE_RESET_TOKEN"] = False
        try:
            resp = client.post(f"{BASE}/forgot-password", json={"email": "alice@example.com"})
        finally:
            app.config["AUTH_EXPOSE_RESET_TOKEN"] = True
        assert resp.status_code == 200
        assert "data" not in resp.get_json()

    def test_forgot_unknown_email(self, client):
        resp = client.post(f"{BASE}/forgot-password", json={"email": "nobody@example.com"})
        assert resp.status_code == 404

    def test_change_password_invalidates_old_token(self, client):
        AccountFactory(username="alice")
        token = _signin(client, "alice")["access_token"]

        wrong = client.post(
            f"{BASE}/change-password",
            headers=_bearer(token),
            json={"current_password": "nope", "new_password": "brand-new-pass"},
        )
        assert wrong.status_code == 401

        ok = client.post(
            f"{BASE}/change-password",
            headers=_bearer(token),
            json={"current_password": DEFAULT_PASSWORD, "new_password": "brand-new-pass"},
        )
        assert ok.status_code == 200
        assert client.get("/api/v1/users/me", headers=_bearer(token)).status_code == 401

        fresh = _signin(client, "alice", "brand-new-pass")["access_token"]
        assert client.get("/api/v1/users/me", headers=_bearer(fresh)).status_code == 200


@pytest.mark.parametrize("path", ["/signin", "/refresh", "/reset-password"])
def test_empty_body_is_unprocessable(client, path):
    assert client.post(f"{BASE}{path}", json={}).status_code == 422
