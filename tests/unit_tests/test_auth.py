"""Tests for the /api/auth endpoints."""

import re

from tests.mocks.models import ADMIN, SUPERADMIN


def _reset_token(mailer, email: str) -> str:
    message = mailer.to(email)[-1]
    match = re.search(r"token=([0-9a-f]{64})", message.plain)
    assert match, message.plain
    return match.group(1)


class TestSignup:
    def test_signup_creates_admin(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/signup",
            json={"name": "New Owner", "email": "New@Example.com", "password": "secret1"},
        )
        assert resp.status_code == 201
        data = resp.json()
        assert data["user"]["email"] == "new@example.com"
        assert data["user"]["role"] == "admin"
        assert "session" in resp.cookies

    def test_signup_existing_email(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/signup",
            json={"name": "Again", "email": ADMIN.email, "password": "secret1"},
        )
        assert resp.status_code == 409
        assert "already exists" in resp.json()["error"]

    def test_signup_short_password(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/signup",
            json={"name": "Short", "email": "short@example.com", "password": "123"},
        )
        assert resp.status_code == 400
        data = resp.json()
        assert data["error"] == "Validation failed"
        assert data["details"][0]["field"] == "password"

    def test_signup_invalid_email(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/signup",
            json={"name": "Bad", "email": "not-an-email", "password": "secret1"},
        )
        assert resp.status_code == 400


class TestLogin:
    def test_login_success(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/login",
            json={"email": ADMIN.email, "password": ADMIN.password},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["message"] == "Authenticated successfully"
        assert data["user"]["email"] == ADMIN.email
        assert data["user"]["last_login"] is not None
        assert "session" in resp.cookies

    def test_login_wrong_password(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/login",
            json={"email": ADMIN.email, "password": "wrong-password"},
        )
        assert resp.status_code == 401
        assert resp.json() == {"error": "Invalid email or password"}

    def test_login_unknown_email(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/login",
            json={"email": "ghost@example.com", "password": "whatever"},
        )
        assert resp.status_code == 401

    def test_login_cookie_opens_me(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/login",
            json={"email": SUPERADMIN.email, "password": SUPERADMIN.password},
        )
        assert resp.status_code == 200

        resp = unauthed_client.get("/api/auth/me")
        assert resp.status_code == 200
        assert resp.json()["role"] == "superadmin"


class TestMe:
    def test_get_me_authenticated(self, client):
        resp = client.get("/api/auth/me")
        assert resp.status_code == 200
        data = resp.json()
        assert data["email"] == ADMIN.email
        assert data["role"] == "admin"

    def test_get_me_unauthenticated(self, unauthed_client):
        resp = unauthed_client.get("/api/auth/me")
        assert resp.status_code == 401
        assert "error" in resp.json()

    def test_get_me_garbage_cookie(self, unauthed_client):
        resp = unauthed_client.get("/api/auth/me", headers={"Cookie": "session=not-a-jwt"})
        assert resp.status_code == 401
        assert "Invalid session" in resp.json()["error"]


class TestLogout:
    def test_logout(self, client):
        resp = client.post("/api/auth/logout")
        assert resp.status_code == 200
        assert resp.json()["message"] == "Logged out successfully"

    def test_logout_requires_session(self, unauthed_client):
        resp = unauthed_client.post("/api/auth/logout")
        assert resp.status_code == 401


class TestResetPassword:
    def _body(self, current=SUPERADMIN.password, new="brand-new-pw", confirm=None):
        return {
            "current_password": current,
            "new_password": new,
            "confirm_password": confirm if confirm is not None else new,
        }

    def test_admin_cannot_use_it(self, client):
        resp = client.post("/api/auth/reset-password", json=self._body(current=ADMIN.password))
        assert resp.status_code == 401

    def test_wrong_current_password(self, superadmin_client):
        resp = superadmin_client.post("/api/auth/reset-password", json=self._body(current="nope-nope"))
        assert resp.status_code == 401
        assert resp.json()["error"] == "Current password is incorrect"

    def test_confirmation_mismatch(self, superadmin_client):
        resp = superadmin_client.post(
            "/api/auth/reset-password",
            json=self._body(new="brand-new-pw", confirm="something-else"),
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "New passwords do not match"

    def test_too_short(self, superadmin_client):
        resp = superadmin_client.post("/api/auth/reset-password", json=self._body(new="abc"))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Password must be at least 6 characters"

    def test_password_changed(self, superadmin_client, unauthed_client):
        resp = superadmin_client.post("/api/auth/reset-password", json=self._body())
        assert resp.status_code == 200

        old = unauthed_client.post(
            "/api/auth/login",
            json={"email": SUPERADMIN.email, "password": SUPERADMIN.password},
        )
        assert old.status_code == 401
        new = unauthed_client.post(
            "/api/auth/login",
            json={"email": SUPERADMIN.email, "password": "brand-new-pw"},
        )
        assert new.status_code == 200


class TestForgotPassword:
    def test_same_answer_for_unknown_email(self, unauthed_client, mailer):
        known = unauthed_client.post("/api/auth/forgot-password", json={"email": SUPERADMIN.email})
        unknown = unauthed_client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
        assert known.status_code == unknown.status_code == 200
        assert known.json() == unknown.json()
        assert mailer.to("ghost@example.com") == []

    def test_admins_get_no_reset_mail(self, unauthed_client, mailer):
        resp = unauthed_client.post("/api/auth/forgot-password", json={"email": ADMIN.email})
        assert resp.status_code == 200
        assert mailer.to(ADMIN.email) == []

    def test_reset_with_emailed_token(self, unauthed_client, mailer):
        unauthed_client.post("/api/auth/forgot-password", json={"email": SUPERADMIN.email})
        token = _reset_token(mailer, SUPERADMIN.email)

        resp = unauthed_client.post(
            "/api/auth/reset-password-token",
            json={"token": token, "new_password": "from-the-email"},
        )
        assert resp.status_code == 200

        resp = unauthed_client.post(
            "/api/auth/login",
            json={"email": SUPERADMIN.email, "password": "from-the-email"},
        )
        assert resp.status_code == 200

    def test_token_works_once(self, unauthed_client, mailer):
        unauthed_client.post("/api/auth/forgot-password", json={"email": SUPERADMIN.email})
        token = _reset_token(mailer, SUPERADMIN.email)
        body = {"token": token, "new_password": "from-the-email"}

        assert unauthed_client.post("/api/auth/reset-password-token", json=body).status_code == 200
        again = unauthed_client.post("/api/auth/reset-password-token", json=body)
        assert again.status_code == 400
        assert again.json()["error"] == "Invalid or expired reset token"

    def test_unknown_token(self, unauthed_client):
        resp = unauthed_client.post(
            "/api/auth/reset-password-token",
            json={"token": "0" * 64, "new_password": "whatever-pw"},
        )
        assert resp.status_code == 400
