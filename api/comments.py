from __future__ import annotations

import logging

from flask import Blueprint, request, jsonify, g, abort

from models import storage
from models.comment import Comment
from models.post import Post
from models.schemas.comment import CommentCreateSchema, CommentOutSchema
from services import auth_guard
from utils.decorators import jwt_required

logger = logging.getLogger(__name__)

bp = Blueprint("comments", __name__)

create_schema = CommentCreateSchema()
out_schema = CommentOutSchema()
out_list_schema = CommentOutSchema(many=True)


@bp.get("/posts/<post_id>/comments")
def list_comments(post_id: str):
    """
    List comments of a post, newest first
    ---
    tags: [Comments]
    parameters:
      - in: path
        name: post_id
        type: string
        required: true
    responses:
      200: { description: OK }
      404: { description: Post not found }
    """
    if not storage.get(Post, post_id):
        abort(404, description="Post not found")
    session = storage.get_session()
    rows = (
        session.query(Comment)
        .filter(Comment.post_id == post_id)
        .order_by(Comment.created_at.desc())
        .all()
    )
    return jsonify({"success": True, "message": "Comments retrieved", "data": out_list_schema.dump(rows)})


@bp.post("/comments")
@jwt_required()
def create_comment():
    """
    Add a comment to a post
    ---
    tags: [Comments]
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
            post_id: { type: string }
            content: { type: string, minLength: 1, maxLength: 2000 }
    responses:
      201: { description: Created }
      400: { description: Validation error }
      401: { description: Unauthorized }
      404: { description: Post not found }
    """
    data = create_schema.load(request.get_json(silent=True) or {})
    if not storage.get(Post, data["post_id"]):
        abort(404, description="Post not found")

    user = g.current_user
    comment = Comment(post_id=data["post_id"], user_id=user.id, author=user.username, content=data["content"])
    storage.new(comment)
    storage.save()
    logger.info("Comment created: comment_id=%s post_id=%s user_id=%s", comment.id, comment.post_id, user.id)
    return jsonify({"success": True, "message": "Comment posted successfully", "data": out_schema.dump(comment)}), 201


@bp.delete("/comments/<comment_id>")
@jwt_required()
def delete_comment(comment_id: str):
    """
    Delete a comment - owner or admin
    ---
    tags: [Comments]
    security:
      - Bearer: []
    parameters:
      - in: path
        name: comment_id
        type: string
        required: true
    responses:
      200: { description: Deleted }
      403: { description: Not the owner }
      404: { description: Not found }
    """
    comment = storage.get(Comment, comment_id)
    if not comment:
        abort(404, description="Comment not found")
    # Comments are owned by user id
    auth_guard().require_owner_or_admin(g.current_user, comment.user_id, key="id")

    comment.delete()
    logger.info("Comment deleted: comment_id=%s user_id=%s", comment_id, g.current_user.id)
    return jsonify({"success": True, "message": "Comment deleted successfully"})
