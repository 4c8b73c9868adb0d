"""
Shared Flask-Limiter instance.

Bound to each app in create_app() with limiter.init_app(app); storage and
header behaviour come from the RATELIMIT_* config keys. The auth views share
a single per-client budget (AUTH_RATE_LIMIT) across register, login, refresh
and logout.
"""
from __future__ import annotations

from flask import current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address

limiter = Limiter(key_func=get_remote_address)

AUTH_LIMIT_MESSAGE = "Too many auth attempts, please try again later."


def _auth_rate_limit() -> str:
    return str(current_app.config.get("AUTH_RATE_LIMIT", "10 per 15 minutes"))


auth_limit = limiter.shared_limit(_auth_rate_limit, scope="auth", error_message=AUTH_LIMIT_MESSAGE)
