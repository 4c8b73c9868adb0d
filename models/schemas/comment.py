from marshmallow import Schema, fields, pre_load, validate

from models.schemas.post import _strip_fields


class CommentCreateSchema(Schema):
    post_id = fields.String(required=True, validate=validate.Length(min=1, max=36))
    content = fields.String(required=True, validate=validate.Length(min=1, max=2000))

    @pre_load
    def strip(self, data, **kwargs):
        return _strip_fields(data, ("post_id", "content"))


class CommentOutSchema(Schema):
    id = fields.String()
    post_id = fields.String()
    user_id = fields.String()
    author = fields.String()
    content = fields.String()
    created_at = fields.DateTime()
