from flask import Blueprint

bp = Blueprint("health", __name__)

@bp.get("/health")
def health():
    """
    Health check
    ---
    tags:
      - Health
    responses:
      200:
        description: API is up
        schema:
          type: object
          properties:
            success:
              type: boolean
            status:
              type: string
              example: ok
            version:
              type: string
              example: 1.0.0
    """
    return {"success": True, "message": "API running", "status": "ok", "version": "1.0.0"}, 200
