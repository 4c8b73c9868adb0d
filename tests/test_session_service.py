from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from models import storage
from models.user import User
from services.errors import Conflict, InvalidInput, TokenInvalid, Unauthorized
from services.session import INVALID_CREDENTIALS

PASSWORD = "pw123456"


def test_register_returns_tokens_and_public_user(session_service, store, issuer):
    result = session_service.register("alice", " Alice@X.com ", PASSWORD)

    assert result.user["username"] == "alice"
    assert result.user["email"] == "alice@x.com"
    assert result.user["role"] == "user"
    assert "password_hash" not in result.user
    assert issuer.verify_access_token(result.access_token)["sub"] == result.user["id"]

    user = store.get(result.user["id"])
    assert user.refresh_token_hash == issuer.digest(result.refresh_token)
    assert user.refresh_token_hash != result.refresh_token
    assert user.email != "alice@x.com"
    assert store.identifier_of(user) == "alice@x.com"
    assert user.password_hash != PASSWORD


def test_register_accepts_admin_role(session_service):
    assert session_service.register("root", "root@x.com", PASSWORD, "admin").user["role"] == "admin"


def test_register_rejects_unknown_role(session_service):
    with pytest.raises(InvalidInput):
        session_service.register("eve", "eve@x.com", PASSWORD, "superuser")
    assert storage.count(User) == 0


@pytest.mark.parametrize("missing", ["username", "email", "password"])
def test_register_requires_all_fields(session_service, missing):
    fields = {"username": "alice", "email": "alice@x.com", "password": PASSWORD}
    fields[missing] = ""
    with pytest.raises(InvalidInput):
        session_service.register(**fields)


def test_duplicate_identifier_variants_conflict(session_service):
    session_service.register("bob", "Bob@X.com", PASSWORD)
    for variant in ("bob@x.com", "  BOB@X.COM", "bOb@x.Com  "):
        with pytest.raises(Conflict):
            session_service.register("bob2", variant, PASSWORD)
    assert storage.count(User) == 1


def test_login_rotates_refresh_token(session_service, store, issuer):
    registered = session_service.register("alice", "alice@x.com", PASSWORD)
    logged_in = session_service.login("ALICE@x.com ", PASSWORD)

    assert logged_in.refresh_token != registered.refresh_token
    assert logged_in.user["email"] == "alice@x.com"
    user = store.get(registered.user["id"])
    assert user.refresh_token_hash == issuer.digest(logged_in.refresh_token)

    # The refresh token handed out at registration has been overwritten
    with pytest.raises(Unauthorized):
        session_service.refresh(registered.refresh_token)


def test_login_failures_are_indistinguishable(session_service):
    session_service.register("alice", "alice@x.com", PASSWORD)

    with pytest.raises(Unauthorized) as unknown:
        session_service.login("nobody@x.com", PASSWORD)
    with pytest.raises(Unauthorized) as wrong:
        session_service.login("alice@x.com", "wrong-password")

    assert unknown.value.message == wrong.value.message == INVALID_CREDENTIALS


def test_login_requires_credentials(session_service):
    with pytest.raises(InvalidInput):
        session_service.login("", PASSWORD)


def test_refresh_is_single_use(session_service):
    first = session_service.register("alice", "alice@x.com", PASSWORD)
    second = session_service.refresh(first.refresh_token)

    assert second.refresh_token != first.refresh_token
    assert second.user is None
    with pytest.raises(Unauthorized):
        session_service.refresh(first.refresh_token)
    # The newest token still works exactly once
    third = session_service.refresh(second.refresh_token)
    with pytest.raises(Unauthorized):
        session_service.refresh(second.refresh_token)
    assert third.access_token


def test_refresh_rejects_expired_session(session_service, store, issuer):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    user = store.get(result.user["id"])
    store.set_refresh(
        user,
        issuer.digest(result.refresh_token),
        datetime.now(timezone.utc) - timedelta(minutes=1),
    )
    with pytest.raises(Unauthorized):
        session_service.refresh(result.refresh_token)


def test_refresh_rejects_unknown_and_missing_tokens(session_service):
    with pytest.raises(Unauthorized):
        session_service.refresh("f" * 96)
    with pytest.raises(InvalidInput):
        session_service.refresh("")


def test_logout_revokes_token_and_clears_session(session_service, store, ledger):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    session_service.logout(result.access_token)

    assert ledger.is_revoked(result.access_token) is True
    user = store.get(result.user["id"])
    assert user.has_active_session is False
    assert user.refresh_token_expiry is None
    with pytest.raises(Unauthorized):
        session_service.refresh(result.refresh_token)


def test_logout_accepts_expired_but_signed_token(session_service, store, issuer, ledger):
    result = session_service.register("alice", "alice@x.com", PASSWORD)
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    expired = issuer.issue_access_token(result.user["id"], "user", now=past)

    session_service.logout(expired)
    assert store.get(result.user["id"]).refresh_token_hash is None


def test_logout_rejects_unsigned_tokens(session_service):
    with pytest.raises(TokenInvalid):
        session_service.logout("not-a-token")
    with pytest.raises(TokenInvalid):
        session_service.logout("")


def test_interleaved_refreshes_of_one_token_succeed_once(session_service, store, issuer, monkeypatch):
    raw = session_service.register("alice", "alice@x.com", PASSWORD).refresh_token
    lookup = store.find_by_refresh_digest
    winners = []

    def lookup_then_race(digest):
        # A second request spends the same token between this read and our write
        user = lookup(digest)
        if not winners:
            winners.append(None)
            winners[0] = session_service.refresh(raw)
        return user

    monkeypatch.setattr(store, "find_by_refresh_digest", lookup_then_race)

    with pytest.raises(Unauthorized):
        session_service.refresh(raw)

    winner = winners[0]
    assert winner.refresh_token != raw
    user = store.get(issuer.verify_access_token(winner.access_token)["sub"])
    assert user.refresh_token_hash == issuer.digest(winner.refresh_token)
