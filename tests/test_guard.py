from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models import storage
from models.user import Role, User
from services.errors import ConfigurationError, Forbidden, TokenExpired, TokenInvalid

PASSWORD = "pw123456"


def make_user(username="alice", role="user", id="user-1"):
    return User(id=id, username=username, role=role)


def test_authenticate_resolves_principal(session_service, guard):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    user = guard.authenticate(result.access_token)
    assert user.id == result.user["id"]
    assert user.username == "alice"


def test_authenticate_rejects_missing_and_garbage(guard):
    with pytest.raises(TokenInvalid):
        guard.authenticate(None)
    with pytest.raises(TokenInvalid):
        guard.authenticate("garbage")


def test_authenticate_rejects_revoked_token(session_service, guard):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    session_service.logout(result.access_token)
    with pytest.raises(TokenInvalid):
        guard.authenticate(result.access_token)


def test_authenticate_rejects_expired_token(session_service, guard, issuer):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    past = datetime.now(timezone.utc) - timedelta(minutes=16)
    with pytest.raises(TokenExpired):
        guard.authenticate(issuer.issue_access_token(result.user["id"], "user", now=past))


def test_authenticate_rejects_deleted_user(session_service, guard, store):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    storage.delete(store.get(result.user["id"]))
    storage.save()
    with pytest.raises(TokenInvalid):
        guard.authenticate(result.access_token)


def test_require_role(guard):
    guard.require_role(make_user(role="admin"), [Role.ADMIN])
    guard.require_role(make_user(role="user"), ["user", "admin"])
    with pytest.raises(Forbidden):
        guard.require_role(make_user(role="user"), [Role.ADMIN])


def test_unknown_role_is_configuration_error(guard):
    with pytest.raises(ConfigurationError):
        guard.require_role(make_user(role="superuser"), [Role.USER])
    with pytest.raises(ConfigurationError):
        guard.require_owner_or_admin(make_user(role="superuser"), "alice", key="username")


def test_owner_or_admin_by_username(guard):
    guard.require_owner_or_admin(make_user("alice"), "alice", key="username")
    guard.require_owner_or_admin(make_user("root", role="admin"), "alice", key="username")
    with pytest.raises(Forbidden):
        guard.require_owner_or_admin(make_user("mallory"), "alice", key="username")


def test_owner_or_admin_by_id(guard):
    guard.require_owner_or_admin(make_user(id="u-1"), "u-1")
    guard.require_owner_or_admin(make_user(id="u-9", role="admin"), "u-1")
    with pytest.raises(Forbidden):
        guard.require_owner_or_admin(make_user(id="u-2"), "u-1")
    with pytest.raises(Forbidden):
        guard.require_owner_or_admin(make_user(id="u-2"), None)


def test_unsupported_ownership_key(guard):
    with pytest.raises(ConfigurationError):
        guard.require_owner_or_admin(make_user(), "x", key="email")
