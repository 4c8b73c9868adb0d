"""HTTP tests for /api/v1/users, /api/v1/me and app wiring."""

from __future__ import annotations

import pytest

from api import create_app
from api.config import ProductionConfig
from conftest import bearer
from services.errors import ConfigurationError


def test_admin_lists_users_without_secrets(client, register):
    register("alice")
    admin = register("root", role="admin")

    resp = client.get("/api/v1/users", headers=bearer(admin["access_token"]))
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["meta"]["total"] == 2
    emails = sorted(u["email"] for u in body["data"])
    assert emails == ["alice@x.com", "root@x.com"]
    text = resp.get_data(as_text=True)
    assert "password_hash" not in text
    assert "refresh_token" not in text


def test_non_admin_is_forbidden(client, register):
    alice = register("alice")
    resp = client.get("/api/v1/users", headers=bearer(alice["access_token"]))
    assert resp.status_code == 403
    assert resp.get_json()["error"] == "FORBIDDEN"


def test_users_requires_authentication(client):
    assert client.get("/api/v1/users").status_code == 401


def test_me_returns_current_user(client, register):
    alice = register("alice", "Alice@X.com")
    resp = client.get("/api/v1/me", headers=bearer(alice["access_token"]))
    assert resp.status_code == 200
    data = resp.get_json()["data"]
    assert data["id"] == alice["user"]["id"]
    assert data["email"] == "alice@x.com"
    assert data["role"] == "user"


def test_health_and_unknown_route(client):
    assert client.get("/api/v1/health").get_json()["status"] == "ok"
    resp = client.get("/api/v1/nope")
    assert resp.status_code == 404
    assert resp.get_json()["success"] is False


def test_missing_secret_fails_fast(monkeypatch):
    monkeypatch.setattr(ProductionConfig, "JWT_SECRET", None)
    monkeypatch.setattr(ProductionConfig, "ALLOW_INSECURE_SECRET", False)
    with pytest.raises(ConfigurationError):
        create_app("production")


def test_pagination_is_clamped_and_validated(client, register):
    admin = register("root", role="admin")

    users = client.get("/api/v1/users?page=0&limit=5000", headers=bearer(admin["access_token"]))
    assert users.get_json()["meta"] == {"page": 1, "limit": 100, "total": 1}

    posts = client.get("/api/v1/posts?limit=0")
    assert posts.get_json()["meta"]["limit"] == 1

    bad = client.get("/api/v1/posts?page=two")
    assert bad.status_code == 400
    assert bad.get_json()["message"] == "page and limit must be integers"
