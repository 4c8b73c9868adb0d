from __future__ import annotations

from flask import Blueprint, jsonify, g

from models import storage
from models.user import Role, User
from models.schemas.user import UserOutSchema
from services import credential_store
from api.utils.pagination import parse_pagination
from utils.decorators import jwt_required, roles_required

bp = Blueprint("users", __name__)

user_out_schema = UserOutSchema()


def dump_user(user: User) -> dict:
    data = user_out_schema.dump(user)
    data["email"] = credential_store().identifier_of(user)
    return data


@bp.get("/users")
@roles_required([Role.ADMIN])
def list_users():
    """
    List all users - admin
    ---
    tags:
      - Users
    security:
      - Bearer: []
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
    responses:
      200: { description: OK }
      401: { description: Unauthorized }
      403: { description: Admin access required }
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(User)
    total = query.count()
    rows = query.order_by(User.created_at.asc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "success": True,
            "message": "Users retrieved",
            "data": [dump_user(u) for u in rows],
            "meta": {"page": page, "limit": limit, "total": total},
        }
    ), 200


@bp.get("/me")
@jwt_required()
def me():
    """
    Get current user info. - user
    ---
    tags:
      - Users
    security:
      - Bearer: []
    responses:
      200:
        description: OK
      401:
        description: Unauthorized
    """
    return jsonify(
        {
            "success": True,
            "message": "Current user",
            "data": dump_user(g.current_user),
        }
    ), 200
