from __future__ import annotations
from functools import wraps
from flask import request, g

from models.user import Role
from services import auth_guard
from services.errors import TokenInvalid


def bearer_token() -> str | None:
    """Return the token from an 'Authorization: Bearer <token>' header, if any."""
    auth = request.headers.get("Authorization", "")
    if not auth.startswith("Bearer "):
        return None
    return auth.split(" ", 1)[1].strip() or None


def jwt_required():
    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            token = bearer_token()
            if token is None:
                raise TokenInvalid("Unauthorized: No token")
            g.current_user = auth_guard().authenticate(token)
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def roles_required(required_roles: list[Role | str]):
    """
    Allow access if the authenticated user holds ANY of the required roles.
    Runs jwt_required first, so 401 always wins over 403.
    """
    def decorator(fn):
        @wraps(fn)
        @jwt_required()
        def wrapper(*args, **kwargs):
            auth_guard().require_role(g.current_user, required_roles)
            return fn(*args, **kwargs)

        return wrapper

    return decorator
