"""
Authentication blueprint:
- POST /auth/register
- POST /auth/login
- POST /auth/refresh
- POST /auth/logout

The implementation:
- Uses argon2 for password hashing (via utils.security)
- Issues short-lived access tokens (JWT, HS256) and opaque refresh tokens
- Stores only the refresh token digest on the user so it can be rotated / cleared
- Revokes access tokens on logout through the in-process revocation ledger
- Shares one per-client rate limit (AUTH_RATE_LIMIT) across all four routes
"""
from __future__ import annotations

from flask import Blueprint, request, jsonify

from models.schemas.user import UserCreateSchema, UserLoginSchema, RefreshSchema
from services import session_service
from services.errors import TokenInvalid
from utils.decorators import bearer_token
from api.limiter import auth_limit

bp = Blueprint("auth", __name__, url_prefix="/auth")

user_create_schema = UserCreateSchema()
user_login_schema = UserLoginSchema()
refresh_schema = RefreshSchema()


@bp.post("/register")
@auth_limit
def register():
    """
    Register a new user and start a session.
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        schema:
          type: object
          required: [username, email, password]
          properties:
            username: { type: string, minLength: 3, maxLength: 50 }
            email: { type: string }
            password: { type: string, minLength: 6, maxLength: 128 }
            role: { type: string, enum: [user, admin] }
    responses:
      201:
        description: Created (returns tokens and the public user)
      400:
        description: Validation error
      409:
        description: Email already registered
      429:
        description: Too many auth attempts
    """
    payload = request.get_json(silent=True) or {}
    data = user_create_schema.load(payload)

    result = session_service().register(
        data["username"], data["email"], data["password"], data.get("role")
    )
    return jsonify(
        {
            "success": True,
            "message": f"User registered successfully as {result.user['role']}",
            **result.to_dict(),
        }
    ), 201


@bp.post("/login")
@auth_limit
def login():
    """
    Login: return access_token and refresh_token
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             email: { type: string }
             password: { type: string }
    responses:
      200:
        description: OK (returns tokens)
      400:
        description: Validation error
      401:
        description: Invalid email or password
      429:
        description: Too many auth attempts
    """
    payload = request.get_json(silent=True) or {}
    data = user_login_schema.load(payload)

    result = session_service().login(data["email"], data["password"])
    return jsonify({"success": True, "message": "Login successful", **result.to_dict()}), 200


@bp.post("/refresh")
@auth_limit
def refresh():
    """
    Use a refresh token to obtain new access and refresh tokens (rotation)
    ---
    tags:
      - Auth
    consumes:
      - application/json
    parameters:
      -  in: body
         name: body
         schema:
           type: object
           properties:
             refresh_token: { type: string }
    responses:
      200:
        description: OK (returns a new token pair; the old refresh token is spent)
      400:
        description: refresh_token missing
      401:
        description: Invalid or expired refresh token
      429:
        description: Too many auth attempts
    """
    payload = request.get_json(silent=True) or {}
    data = refresh_schema.load(payload)

    result = session_service().refresh(data["refresh_token"])
    return jsonify({"success": True, "message": "Token refreshed", **result.to_dict()}), 200


@bp.post("/logout")
@auth_limit
def logout():
    """
    Logout: revokes the access token and clears the refresh session
    ---
    tags:
      - Auth
    security:
      - Bearer: []
    responses:
      200:
        description: Logout successful
      401:
        description: Unauthorized
      429:
        description: Too many auth attempts
    """
    token = bearer_token()
    if token is None:
        raise TokenInvalid("Unauthorized: No token")

    session_service().logout(token)
    return jsonify({"success": True, "message": "Logout successful"}), 200
