"""
Credential store: the persistence seam used by the session and guard services.

Wraps DBStorage so storage faults surface as service errors:
- IntegrityError on insert -> Conflict (duplicate identifier race)
- any other SQLAlchemyError -> Internal (rolled back, logged, never retried)

Refresh rotation is a compare-and-swap on the stored digest, so two requests
spending the same refresh token cannot both win.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from models.user import Role, User
from services.errors import Conflict, Internal
from utils.encryption import IdentifierCipher, normalize_identifier

logger = logging.getLogger(__name__)


class CredentialStore:
    def __init__(self, storage, cipher: IdentifierCipher):
        self.storage = storage
        self.cipher = cipher

    @contextmanager
    def _faults(self, action: str, conflict: str | None = None):
        try:
            yield
        except IntegrityError:
            self.storage.rollback()
            if conflict is None:
                logger.exception("Credential store integrity failure during %s", action)
                raise Internal()
            logger.warning("Credential store conflict during %s", action)
            raise Conflict(conflict)
        except SQLAlchemyError:
            self.storage.rollback()
            logger.exception("Credential store failure during %s", action)
            raise Internal()

    def get(self, principal_id: str) -> User | None:
        with self._faults("get"):
            return self.storage.get(User, principal_id)

    def find_by_identifier(self, identifier: str) -> User | None:
        with self._faults("identifier lookup"):
            return self.storage.find_one(User, email_index=self.cipher.index(identifier))

    def find_by_refresh_digest(self, digest: str) -> User | None:
        with self._faults("refresh lookup"):
            return self.storage.find_one(User, refresh_token_hash=digest)

    def identifier_of(self, user: User) -> str:
        return self.cipher.decrypt(user.email)

    def create(self, *, username: str, identifier: str, password_hash: str, role: Role) -> User:
        identifier = normalize_identifier(identifier)
        user = User(
            username=username,
            email=self.cipher.encrypt(identifier),
            email_index=self.cipher.index(identifier),
            password_hash=password_hash,
            role=role.value,
        )
        with self._faults("insert", conflict="Email already registered"):
            self.storage.new(user)
            self.storage.save()
        return user

    def set_refresh(self, user: User, digest: str | None, expires_at: datetime | None) -> None:
        """Overwrite the single refresh slot; passing None clears the session."""
        user.refresh_token_hash = digest
        user.refresh_token_expiry = expires_at
        with self._faults("refresh update"):
            self.storage.new(user)
            self.storage.save()

    def rotate_refresh(self, user: User, spent_digest: str, digest: str, expires_at: datetime) -> bool:
        """
        Replace the refresh slot only if it still holds spent_digest.
        Returns False when another request already rotated or cleared it.
        """
        stmt = (
            update(User)
            .where(User.id == user.id, User.refresh_token_hash == spent_digest)
            .values(refresh_token_hash=digest, refresh_token_expiry=expires_at)
            .execution_options(synchronize_session=False)
        )
        session = self.storage.get_session()
        with self._faults("refresh rotation"):
            result = session.execute(stmt)
            self.storage.save()
        # Reload the slot on next access; the loaded copy may predate the update
        session.expire(user, ["refresh_token_hash", "refresh_token_expiry"])
        return result.rowcount == 1

    def clear_refresh(self, principal_id: str) -> bool:
        user = self.get(principal_id)
        if user is None:
            return False
        self.set_refresh(user, None, None)
        return True
