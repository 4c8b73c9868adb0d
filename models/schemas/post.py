from marshmallow import EXCLUDE, Schema, fields, pre_load, validate


def _strip_fields(data, names):
    if isinstance(data, dict):
        data = dict(data)
        for name in names:
            if isinstance(data.get(name), str):
                data[name] = data[name].strip()
    return data


class PostCreateSchema(Schema):
    class Meta:
        # author and ownership come from the authenticated user, not the body
        unknown = EXCLUDE

    title = fields.String(required=True, validate=validate.Length(min=3, max=200))
    content = fields.String(required=True, validate=validate.Length(min=10, max=50000))

    @pre_load
    def strip(self, data, **kwargs):
        return _strip_fields(data, ("title", "content"))


class PostUpdateSchema(PostCreateSchema):
    pass


class PostOutSchema(Schema):
    id = fields.String()
    title = fields.String()
    content = fields.String()
    author = fields.String()
    user_id = fields.String(allow_none=True)
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
