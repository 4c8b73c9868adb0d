"""
Identifier confidentiality helpers.

- Fernet (cryptography) encrypts the normalized email before it is stored
- a keyed HMAC-SHA256 of the same value is stored alongside it so the
  database can answer equality lookups without decrypting every row
"""
from __future__ import annotations

import base64
import hashlib
import hmac

from cryptography.fernet import Fernet, InvalidToken

from services.errors import ConfigurationError, Internal

# Fixed salt so the same secret always derives the same keys across restarts
_KDF_SALT = b"blog-api:identifier-cipher"


def normalize_identifier(value: str) -> str:
    return value.strip().lower()


def derive_key(secret: str) -> bytes:
    """Derive a urlsafe base64 Fernet key from an arbitrary secret (scrypt)."""
    raw = hashlib.scrypt(secret.encode("utf-8"), salt=_KDF_SALT, n=2 ** 14, r=8, p=1, dklen=32)
    return base64.urlsafe_b64encode(raw)


class IdentifierCipher:
    def __init__(self, key: str | bytes):
        if isinstance(key, str):
            key = key.encode("ascii")
        try:
            self._fernet = Fernet(key)
        except ValueError as exc:
            raise ConfigurationError(f"ENCRYPTION_KEY is not a valid Fernet key: {exc}")
        # Separate the index key from the encryption key
        self._index_key = hmac.new(key, b"identifier-index", hashlib.sha256).digest()

    @classmethod
    def from_config(cls, config, signing_secret: str) -> "IdentifierCipher":
        """Use ENCRYPTION_KEY when set, otherwise derive one from the signing secret."""
        key = config.get("ENCRYPTION_KEY")
        if not key:
            key = derive_key(signing_secret)
        return cls(key)

    def encrypt(self, identifier: str) -> str:
        return self._fernet.encrypt(normalize_identifier(identifier).encode("utf-8")).decode("ascii")

    def decrypt(self, token: str) -> str:
        try:
            return self._fernet.decrypt(token.encode("ascii")).decode("utf-8")
        except InvalidToken:
            raise Internal("Stored identifier could not be decrypted")

    def index(self, identifier: str) -> str:
        """Deterministic lookup key for a (normalized) identifier."""
        return hmac.new(
            self._index_key,
            normalize_identifier(identifier).encode("utf-8"),
            hashlib.sha256,
        ).hexdigest()
