"""
Shared test fixtures.

Provides a FastAPI TestClient wired to:
  • a temporary SQLite database (via app lifespan)
  • a temporary uploads directory
  • a recording mailer instead of SMTP
  • three seeded accounts: two admins and the superadmin

The `client` fixture runs the full lifespan (DB init / shutdown) and
sends every request with the first admin's session cookie.  Use
`unauthed_client`, `other_client` or `superadmin_client` for other
identities; they all share one app instance and database.

`store` opens the temp database in the test's own event loop, for
service-level tests that call the repository directly.  Don't mix it
with the HTTP clients in one test.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from venuebook import config, db
from venuebook.dependencies import SESSION_COOKIE, create_jwt
from venuebook.main import app
from venuebook.rate_limit import limiter
from venuebook.services.passwords import hash_password
from tests.mocks.models import ADMIN, OTHER_ADMIN, SUPERADMIN, Account
from tests.mocks.services import RecordingMailer


# ── Helpers ────────────────────────────────────────────────────────────────


class SignedInClient:
    """Sends every request with a fixed session cookie."""

    def __init__(self, client: TestClient, account: Account, user_id: str) -> None:
        self._client = client
        self.account = account
        self.id = user_id
        token = create_jwt(user_id, account.email, account.role)
        self._headers = {"Cookie": f"{SESSION_COOKIE}={token}"}

    def request(self, method: str, url: str, **kwargs):
        headers = {**self._headers, **kwargs.pop("headers", {})}
        return self._client.request(method, url, headers=headers, **kwargs)

    def get(self, url: str, **kwargs):
        return self.request("GET", url, **kwargs)

    def post(self, url: str, **kwargs):
        return self.request("POST", url, **kwargs)

    def put(self, url: str, **kwargs):
        return self.request("PUT", url, **kwargs)

    def patch(self, url: str, **kwargs):
        return self.request("PATCH", url, **kwargs)

    def delete(self, url: str, **kwargs):
        return self.request("DELETE", url, **kwargs)


def _seed_accounts() -> dict[str, str]:
    """Create the test accounts before the app starts. Returns email -> user id."""

    async def _seed() -> dict[str, str]:
        await db.init_db()
        try:
            ids = {}
            for account in (ADMIN, OTHER_ADMIN, SUPERADMIN):
                row = await db.create_user(
                    account.name,
                    account.email,
                    password_hash=hash_password(account.password),
                    role=account.role,
                    phone=account.phone,
                )
                ids[account.email] = row["id"]
            return ids
        finally:
            await db.close_db()

    return asyncio.run(_seed())


# ── Fixtures ───────────────────────────────────────────────────────────────


@pytest.fixture()
def _test_env(monkeypatch, tmp_path):
    """
    Internal fixture that patches the DB path, uploads dir, mailer and
    rate limiter so the app runs against throwaway state.
    """
    # ── Temp database and uploads ─────────────────────────────────────
    monkeypatch.setattr(db, "DB_PATH", str(tmp_path / "test.db"))
    uploads = tmp_path / "uploads"
    uploads.mkdir()
    monkeypatch.setattr(config, "UPLOADS_DIR", str(uploads))

    # ── Record emails instead of sending ──────────────────────────────
    mailer = RecordingMailer()
    monkeypatch.setattr("venuebook.services.email.send_email", mailer)

    # ── Disable rate limiting in tests ────────────────────────────────
    monkeypatch.setattr(limiter, "enabled", False)

    return mailer


@pytest.fixture()
def mailer(_test_env) -> RecordingMailer:
    """Public alias for tests that inspect sent emails."""
    return _test_env


@pytest.fixture()
def uploads_dir(_test_env) -> Path:
    return Path(config.UPLOADS_DIR)


@pytest.fixture()
def account_ids(_test_env) -> dict[str, str]:
    return _seed_accounts()


@pytest.fixture()
def unauthed_client(account_ids) -> TestClient:
    """
    TestClient without a session cookie.

    Uses a context manager so the lifespan runs (DB init/shutdown).
    """
    app.dependency_overrides.clear()

    with TestClient(app, raise_server_exceptions=False) as tc:
        yield tc

    app.dependency_overrides.clear()


@pytest.fixture()
def client(unauthed_client, account_ids) -> SignedInClient:
    """Signed in as ADMIN."""
    return SignedInClient(unauthed_client, ADMIN, account_ids[ADMIN.email])


@pytest.fixture()
def other_client(unauthed_client, account_ids) -> SignedInClient:
    """Signed in as OTHER_ADMIN."""
    return SignedInClient(unauthed_client, OTHER_ADMIN, account_ids[OTHER_ADMIN.email])


@pytest.fixture()
def superadmin_client(unauthed_client, account_ids) -> SignedInClient:
    return SignedInClient(unauthed_client, SUPERADMIN, account_ids[SUPERADMIN.email])


@pytest.fixture()
async def store(_test_env):
    """Open the temp database in the test's event loop."""
    await db.init_db()
    yield db
    await db.close_db()
