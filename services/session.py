"""
Session lifecycle: register / login / refresh / logout.

Every successful register, login and refresh rotates the principal's single
refresh slot (old digest overwritten), so a refresh token works exactly once.
Refresh swaps the slot only while it still holds the presented digest.
Logout revokes the presented access token in the in-process ledger and clears
the refresh slot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict

from models.base_model import as_utc, utcnow
from models.credential_store import CredentialStore
from models.user import Role, User
from services.errors import Conflict, InvalidInput, TokenInvalid, Unauthorized
from utils.encryption import normalize_identifier
from utils.revocation import RevocationLedger
from utils.security import hash_password, verify_password
from utils.tokens import TokenIssuer

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"
INVALID_REFRESH = "Invalid or expired refresh token"


@dataclass
class SessionResult:
    access_token: str
    refresh_token: str
    expires_in: int
    user: Dict[str, Any] | None = field(default=None)

    def to_dict(self) -> Dict[str, Any]:
        body = {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "token_type": "bearer",
            "expires_in": self.expires_in,
        }
        if self.user is not None:
            body["user"] = self.user
        return body


class SessionService:
    def __init__(self, *, store: CredentialStore, issuer: TokenIssuer, ledger: RevocationLedger):
        self.store = store
        self.issuer = issuer
        self.ledger = ledger

    # ------------------------------------------------------------------ #
    # Register
    # ------------------------------------------------------------------ #

    def register(self, username: str, email: str, password: str, role: Role | str | None = None) -> SessionResult:
        if not username or not email or not password:
            raise InvalidInput("All fields are required")
        try:
            role = Role(role) if role else Role.USER
        except ValueError:
            raise InvalidInput("Role must be one of: user, admin")
        identifier = normalize_identifier(email)

        if self.store.find_by_identifier(identifier) is not None:
            logger.warning("Auth register failed: email already registered")
            raise Conflict("Email already registered")

        user = self.store.create(
            username=username.strip(),
            identifier=identifier,
            password_hash=hash_password(password),
            role=role,
        )
        result = self._start_session(user, identifier)
        logger.info("Auth register success: user_id=%s role=%s", user.id, user.role)
        return result

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, email: str, password: str) -> SessionResult:
        if not email or not password:
            raise InvalidInput("Email and password required")
        identifier = normalize_identifier(email)

        user = self.store.find_by_identifier(identifier)
        if user is None:
            logger.warning("Auth login failed: user not found")
            raise Unauthorized(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.warning("Auth login failed: password mismatch user_id=%s", user.id)
            raise Unauthorized(INVALID_CREDENTIALS)

        result = self._start_session(user, identifier)
        logger.info("Auth login success: user_id=%s", user.id)
        return result

    # ------------------------------------------------------------------ #
    # Refresh (single-use rotation)
    # ------------------------------------------------------------------ #

    def refresh(self, refresh_token: str) -> SessionResult:
        if not refresh_token:
            raise InvalidInput("Refresh token required")

        spent = self.issuer.digest(refresh_token)
        user = self.store.find_by_refresh_digest(spent)
        expiry = as_utc(user.refresh_token_expiry) if user is not None else None
        if user is None or expiry is None or expiry < utcnow():
            logger.warning("Auth refresh failed: invalid or expired token")
            raise Unauthorized(INVALID_REFRESH)

        result = self._start_session(user, spent_digest=spent)
        logger.info("Auth token refresh success: user_id=%s", user.id)
        return result

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, access_token: str) -> None:
        """
        Revoke the access token and cut the refresh path.
        An expired but correctly signed token still identifies whose session to clear.
        """
        if not access_token:
            raise TokenInvalid()
        claims = self.issuer.verify_access_token(access_token, verify_exp=False)

        self.ledger.revoke(access_token, claims.get("exp"))
        self.store.clear_refresh(claims["sub"])
        logger.info("Auth logout success: user_id=%s", claims["sub"])

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _start_session(
        self, user: User, identifier: str | None = None, spent_digest: str | None = None
    ) -> SessionResult:
        role = Role.from_value(user.role)
        refresh = self.issuer.issue_refresh_token()
        if spent_digest is None:
            self.store.set_refresh(user, refresh.digest, refresh.expires_at)
        elif not self.store.rotate_refresh(user, spent_digest, refresh.digest, refresh.expires_at):
            # Another request spent this refresh token first
            logger.warning("Auth refresh failed: token already rotated user_id=%s", user.id)
            raise Unauthorized(INVALID_REFRESH)
        access = self.issuer.issue_access_token(user.id, role.value)

        public = None
        if identifier is not None:
            public = public_principal(user, identifier)
        return SessionResult(
            access_token=access,
            refresh_token=refresh.raw,
            expires_in=self.issuer.access_expires_in,
            user=public,
        )


def public_principal(user: User, identifier: str) -> Dict[str, Any]:
    """Fields safe to hand back to the caller (never hashes or ciphertext)."""
    return {
        "id": user.id,
        "username": user.username,
        "email": identifier,
        "role": user.role,
    }
