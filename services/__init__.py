"""
Service layer: session lifecycle and authorization.

init_app() builds the per-process components once and keeps them in
app.extensions; views reach them through session_service() / auth_guard().
"""
from __future__ import annotations

from flask import Flask, current_app


def init_app(app: Flask) -> None:
    from models import storage
    from models.credential_store import CredentialStore
    from services.guard import AuthorizationGuard
    from services.session import SessionService
    from utils.encryption import IdentifierCipher
    from utils.revocation import RevocationLedger
    from utils.tokens import TokenIssuer

    issuer = TokenIssuer.from_config(app.config)
    cipher = IdentifierCipher.from_config(app.config, issuer.secret)
    ledger = RevocationLedger(default_ttl=app.config["REVOCATION_DEFAULT_TTL"])
    store = CredentialStore(storage, cipher)

    app.extensions["token_issuer"] = issuer
    app.extensions["revocation_ledger"] = ledger
    app.extensions["credential_store"] = store
    app.extensions["session_service"] = SessionService(store=store, issuer=issuer, ledger=ledger)
    app.extensions["auth_guard"] = AuthorizationGuard(store=store, issuer=issuer, ledger=ledger)


def session_service():
    return current_app.extensions["session_service"]


def auth_guard():
    return current_app.extensions["auth_guard"]


def credential_store():
    return current_app.extensions["credential_store"]
