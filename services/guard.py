"""
Authorization guard: resolves a bearer access token to a stored principal and
answers role / ownership questions for the post and comment handlers.
"""
from __future__ import annotations

import logging
from typing import Iterable

from models.credential_store import CredentialStore
from models.user import Role, User
from services.errors import ConfigurationError, Forbidden, TokenInvalid
from utils.revocation import RevocationLedger
from utils.tokens import TokenIssuer

logger = logging.getLogger(__name__)

OWNERSHIP_KEYS = ("id", "username")


class AuthorizationGuard:
    def __init__(self, *, store: CredentialStore, issuer: TokenIssuer, ledger: RevocationLedger):
        self.store = store
        self.issuer = issuer
        self.ledger = ledger

    def authenticate(self, token: str | None) -> User:
        if not token:
            raise TokenInvalid()
        if self.ledger.is_revoked(token):
            logger.warning("Rejected revoked access token")
            raise TokenInvalid()

        claims = self.issuer.verify_access_token(token)
        user = self.store.get(claims["sub"])
        if user is None:
            logger.warning("Valid token points to missing user_id=%s", claims["sub"])
            raise TokenInvalid()
        return user

    def require_role(self, principal: User, allowed_roles: Iterable[Role | str]) -> None:
        role = Role.from_value(principal.role)
        allowed = {Role.from_value(r) for r in allowed_roles}
        if role not in allowed:
            names = ", ".join(sorted(r.value for r in allowed))
            raise Forbidden(f"Forbidden: Requires one of these roles: {names}")

    def require_owner_or_admin(self, principal: User, owner, key: str = "id") -> None:
        """
        Admins always pass; users pass when getattr(principal, key) == owner.
        Posts are owned by display name (key="username"), comments by id.
        """
        if key not in OWNERSHIP_KEYS:
            raise ConfigurationError(f"Unsupported ownership key: {key}")

        role = Role.from_value(principal.role)
        if role is Role.ADMIN:
            return
        if role is Role.USER:
            if owner is not None and str(getattr(principal, key)) == str(owner):
                return
            raise Forbidden("Forbidden: You can only modify your own resources")
        raise ConfigurationError(f"Unhandled role: {role}")
