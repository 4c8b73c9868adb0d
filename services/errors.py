"""
Service-level error taxonomy.

Each error carries the HTTP status and the machine-readable code used by
api.errors to build the uniform error envelope. Messages are safe to show
to callers; operational detail belongs in the logs.
"""
from __future__ import annotations


class ServiceError(Exception):
    status = 500
    code = "INTERNAL_ERROR"
    default_message = "An unexpected error occurred"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(ServiceError):
    status = 400
    code = "BAD_REQUEST"
    default_message = "Invalid input"


class Unauthorized(ServiceError):
    status = 401
    code = "UNAUTHORIZED"
    default_message = "Unauthorized"


class TokenInvalid(Unauthorized):
    default_message = "Invalid or expired token"


class TokenExpired(TokenInvalid):
    pass


class Forbidden(ServiceError):
    status = 403
    code = "FORBIDDEN"
    default_message = "Forbidden"


class NotFound(ServiceError):
    status = 404
    code = "NOT_FOUND"
    default_message = "Resource not found"


class Conflict(ServiceError):
    status = 409
    code = "CONFLICT"
    default_message = "Conflict"


class Internal(ServiceError):
    pass


class ConfigurationError(Internal):
    """Raised for missing secrets or values the application cannot interpret."""
