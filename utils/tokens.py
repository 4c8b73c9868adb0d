"""
Token issuing and verification:
- short-lived access tokens are JWTs signed with HS256 (PyJWT)
- refresh tokens are opaque random strings; only their SHA-256 digest is stored
"""
from __future__ import annotations

import hashlib
import logging
import secrets
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NamedTuple

import jwt

from services.errors import ConfigurationError, TokenExpired, TokenInvalid

logger = logging.getLogger(__name__)

# Development-only signing key, accepted only in testing / explicit insecure mode
INSECURE_DEV_SECRET = "insecure-test-secret"

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_BYTES = 48


def resolve_jwt_secret(config) -> str:
    """
    Return the configured signing secret.
    Falls back to INSECURE_DEV_SECRET only when TESTING or ALLOW_INSECURE_SECRET is set.
    """
    secret = config.get("JWT_SECRET")
    if secret:
        return secret
    if config.get("TESTING") or config.get("ALLOW_INSECURE_SECRET"):
        logger.warning("JWT_SECRET is not set; using the insecure development secret")
        return INSECURE_DEV_SECRET
    raise ConfigurationError("JWT_SECRET must be set (or ALLOW_INSECURE_SECRET enabled for local use)")


class IssuedRefreshToken(NamedTuple):
    raw: str
    digest: str
    expires_at: datetime


class TokenIssuer:
    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = "HS256",
        issuer: str = "blog-api",
        access_expires: timedelta = timedelta(minutes=15),
        refresh_expires: timedelta = timedelta(days=7),
    ):
        self.secret = secret
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires

    @classmethod
    def from_config(cls, config) -> "TokenIssuer":
        return cls(
            resolve_jwt_secret(config),
            algorithm=config.get("JWT_ALGORITHM", "HS256"),
            issuer=config.get("JWT_ISSUER", "blog-api"),
            access_expires=config.get("ACCESS_TOKEN_EXPIRES", timedelta(minutes=15)),
            refresh_expires=config.get("REFRESH_TOKEN_EXPIRES", timedelta(days=7)),
        )

    @staticmethod
    def _now() -> datetime:
        return datetime.now(timezone.utc)

    def issue_access_token(self, principal_id: str, role: str, now: datetime | None = None) -> str:
        now = now or self._now()
        payload = {
            "iss": self.issuer,
            "sub": str(principal_id),
            "role": str(role),
            "iat": int(now.timestamp()),
            "exp": int((now + self.access_expires).timestamp()),
            "type": ACCESS_TOKEN_TYPE,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify_access_token(self, token: str, verify_exp: bool = True) -> Dict[str, Any]:
        """
        Decode and validate an access token.
        Raises TokenExpired / TokenInvalid; both surface as 401.
        """
        if not token:
            raise TokenInvalid()
        try:
            decoded = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"verify_exp": verify_exp, "require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired()
        except jwt.InvalidTokenError:
            raise TokenInvalid()

        if decoded.get("type") != ACCESS_TOKEN_TYPE:
            raise TokenInvalid()
        return decoded

    @property
    def access_expires_in(self) -> int:
        return int(self.access_expires.total_seconds())

    @staticmethod
    def digest(raw_token: str) -> str:
        return hashlib.sha256(raw_token.encode("utf-8")).hexdigest()

    def issue_refresh_token(self, now: datetime | None = None) -> IssuedRefreshToken:
        raw = secrets.token_hex(REFRESH_TOKEN_BYTES)
        return IssuedRefreshToken(
            raw=raw,
            digest=self.digest(raw),
            expires_at=(now or self._now()) + self.refresh_expires,
        )
