from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.post import Post
from models.schemas.post import PostCreateSchema, PostUpdateSchema, PostOutSchema
from services import auth_guard
from api.utils.pagination import parse_pagination
from utils.decorators import jwt_required

logger = logging.getLogger(__name__)

bp = Blueprint("posts", __name__)

create_schema = PostCreateSchema()
update_schema = PostUpdateSchema()
out_schema = PostOutSchema()
out_list_schema = PostOutSchema(many=True)


def get_post_or_404(post_id: str) -> Post:
    post = storage.get(Post, post_id)
    if not post:
        abort(404, description="Post not found")
    return post


@bp.get("/posts")
def list_posts():
    """
    List posts, newest first
    ---
    tags: [Posts]
    parameters:
      - in: query
        name: page
        type: integer
        default: 1
      - in: query
        name: limit
        type: integer
        default: 20
      - in: query
        name: author
        type: string
    responses:
      200: { description: OK }
    """
    session = storage.get_session()
    page, limit = parse_pagination()

    query = session.query(Post)
    author = request.args.get("author")
    if author:
        query = query.filter(Post.author == author.strip())

    total = query.count()
    rows = query.order_by(Post.created_at.desc()).offset((page - 1) * limit).limit(limit).all()
    return jsonify(
        {
            "success": True,
            "message": "Posts retrieved",
            "data": out_list_schema.dump(rows),
            "meta": {"page": page, "limit": limit, "total": total},
        }
    )


@bp.get("/posts/<post_id>")
def get_post(post_id: str):
    """
    Get a post by id
    ---
    tags: [Posts]
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Not found }
    """
    post = get_post_or_404(post_id)
    return jsonify({"success": True, "message": "Post retrieved", "data": out_schema.dump(post)})


@bp.post("/posts")
@jwt_required()
def create_post():
    """
    Create a post authored by the current user
    ---
    tags: [Posts]
    security:
      - Bearer: []
    consumes:
      - application/json
    parameters:
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, minLength: 3, maxLength: 200 }
            content: { type: string, minLength: 10, maxLength: 50000 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    user = g.current_user
    post = Post(title=data["title"], content=data["content"], author=user.username, user_id=user.id)
    storage.new(post)
    storage.save()
    logger.info("Post created: post_id=%s user_id=%s", post.id, user.id)
    return jsonify({"success": True, "message": "Post created successfully", "data": out_schema.dump(post)}), 201


@bp.put("/posts/<post_id>")
@jwt_required()
def update_post(post_id: str):
    """
    Replace title and content of a post - owner or admin
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
      - in: body
        name: body
        required: true
        schema:
          type: object
          properties:
            title: { type: string, minLength: 3, maxLength: 200 }
            content: { type: string, minLength: 10, maxLength: 50000 }
    responses:
      200: { description: OK }
      400: { description: Validation error }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    data = update_schema.load(request.get_json(silent=True) or {})
    post = get_post_or_404(post_id)
    # Posts are owned by display name
    auth_guard().require_owner_or_admin(g.current_user, post.author, key="username")

    post.title = data["title"]
    post.content = data["content"]
    post.save()
    logger.info("Post updated: post_id=%s user_id=%s", post.id, g.current_user.id)
    return jsonify({"success": True, "message": "Post updated successfully", "data": out_schema.dump(post)})


@bp.delete("/posts/<post_id>")
@jwt_required()
def delete_post(post_id: str):
    """
    Delete a post and its comments - owner or admin
    ---
    tags: [Posts]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    post = get_post_or_404(post_id)
    auth_guard().require_owner_or_admin(g.current_user, post.author, key="username")

    post.delete()
    logger.info("Post deleted: post_id=%s user_id=%s", post_id, g.current_user.id)
    return jsonify({"success": True, "message": "Post deleted successfully"})
