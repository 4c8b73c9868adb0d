"""Pytest fixtures: a testing app over a fresh in-memory SQLite schema per test."""

from __future__ import annotations

import os

# DBStorage picks its engine when `models` is first imported
os.environ["APP_ENV"] = "test"
os.environ.pop("DATABASE_URL", None)

import pytest  # noqa: E402

from api import create_app  # noqa: E402
from models import storage  # noqa: E402

PASSWORD = "pw123456"


@pytest.fixture()
def app():
    """Flask app built with TestingConfig; tables are recreated for every test."""
    storage.reset()
    app = create_app("testing")
    yield app
    app.extensions["revocation_ledger"].close()
    storage.close()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def issuer(app):
    return app.extensions["token_issuer"]


@pytest.fixture()
def ledger(app):
    return app.extensions["revocation_ledger"]


@pytest.fixture()
def store(app):
    return app.extensions["credential_store"]


@pytest.fixture()
def session_service(app):
    return app.extensions["session_service"]


@pytest.fixture()
def guard(app):
    return app.extensions["auth_guard"]


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def register(client):
    """Register through the API and return the JSON body."""

    def _register(username="alice", email=None, password=PASSWORD, role=None):
        payload = {
            "username": username,
            "email": email or f"{username}@x.com",
            "password": password,
        }
        if role:
            payload["role"] = role
        resp = client.post("/api/v1/auth/register", json=payload)
        assert resp.status_code == 201, resp.get_json()
        return resp.get_json()

    return _register
