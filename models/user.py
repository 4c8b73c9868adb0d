from enum import Enum

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from models.base_model import Base, BaseModel
from services.errors import ConfigurationError


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def from_value(cls, value) -> "Role":
        """Resolve a stored role; anything outside the enum is a configuration error."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unknown role: {value!r}")


class User(BaseModel, Base):
    """
    A registered principal.

    - email holds the Fernet ciphertext of the normalized identifier
    - email_index holds its keyed HMAC so equality lookups stay in the database
    - refresh_token_hash / refresh_token_expiry are both null when no session is active
    """
    __tablename__ = "users"

    username = Column(String(50), nullable=False)
    email = Column(String(512), nullable=False)
    email_index = Column(String(64), nullable=False, unique=True, index=True)
    password_hash = Column(String(255), nullable=False)
    role = Column(String(16), nullable=False, default=Role.USER.value)
    refresh_token_hash = Column(String(64), nullable=True, index=True)
    refresh_token_expiry = Column(DateTime(timezone=True), nullable=True)

    posts = relationship("Post", back_populates="user", passive_deletes=True)
    comments = relationship("Comment", back_populates="user", passive_deletes=True)

    @property
    def has_active_session(self) -> bool:
        return self.refresh_token_hash is not None
