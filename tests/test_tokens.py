from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from services.errors import ConfigurationError, TokenExpired, TokenInvalid, Unauthorized
from utils.tokens import INSECURE_DEV_SECRET, TokenIssuer, resolve_jwt_secret

SECRET = "unit-test-secret-that-is-long-enough-for-hs256"


@pytest.fixture()
def tokens() -> TokenIssuer:
    return TokenIssuer(SECRET)


def test_access_token_round_trip(tokens):
    token = tokens.issue_access_token("user-1", "admin")
    claims = tokens.verify_access_token(token)
    assert claims["sub"] == "user-1"
    assert claims["role"] == "admin"
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 15 * 60


def test_access_tokens_are_unique(tokens):
    assert tokens.issue_access_token("u", "user") != tokens.issue_access_token("u", "user")


def test_expired_access_token_fails(tokens):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = tokens.issue_access_token("user-1", "user", now=past)
    with pytest.raises(TokenExpired):
        tokens.verify_access_token(token)


def test_expired_token_still_decodes_without_expiry_check(tokens):
    past = datetime.now(timezone.utc) - timedelta(hours=1)
    token = tokens.issue_access_token("user-1", "user", now=past)
    assert tokens.verify_access_token(token, verify_exp=False)["sub"] == "user-1"


def test_token_signed_with_other_secret_is_invalid(tokens):
    foreign = TokenIssuer("some-other-secret-that-is-also-long-enough").issue_access_token("u", "user")
    with pytest.raises(TokenInvalid):
        tokens.verify_access_token(foreign)


def test_tampered_and_garbage_tokens_are_invalid(tokens):
    token = tokens.issue_access_token("u", "user")
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    for bad in (tampered, "not-a-jwt", ""):
        with pytest.raises(TokenInvalid):
            tokens.verify_access_token(bad)


def test_token_failures_are_unauthorized():
    assert issubclass(TokenExpired, Unauthorized)
    assert issubclass(TokenInvalid, Unauthorized)
    assert TokenExpired().status == 401


def test_refresh_token_shape_and_digest(tokens):
    issued = tokens.issue_refresh_token()
    assert len(issued.raw) == 96
    int(issued.raw, 16)
    assert issued.digest == hashlib.sha256(issued.raw.encode()).hexdigest()
    assert issued.digest != issued.raw
    assert tokens.digest(issued.raw) == issued.digest
    remaining = issued.expires_at - datetime.now(timezone.utc)
    assert timedelta(days=6, hours=23) < remaining <= timedelta(days=7)


def test_refresh_tokens_are_random(tokens):
    assert tokens.issue_refresh_token().raw != tokens.issue_refresh_token().raw


def test_resolve_secret_prefers_configured_value():
    assert resolve_jwt_secret({"JWT_SECRET": "configured"}) == "configured"


def test_resolve_secret_fails_fast_without_secret():
    with pytest.raises(ConfigurationError):
        resolve_jwt_secret({"JWT_SECRET": None, "TESTING": False})


@pytest.mark.parametrize("flag", ["TESTING", "ALLOW_INSECURE_SECRET"])
def test_resolve_secret_falls_back_only_when_flagged(flag):
    assert resolve_jwt_secret({"JWT_SECRET": "", flag: True}) == INSECURE_DEV_SECRET
