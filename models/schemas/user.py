from marshmallow import Schema, fields, pre_load, validate, validates, ValidationError

from models.user import Role


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class UserCreateSchema(Schema):
    username = fields.String(required=True, validate=validate.Length(min=3, max=50))
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=6, max=128))
    role = fields.String(load_default=None, allow_none=True, validate=validate.OneOf([r.value for r in Role]))

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict):
            data = dict(data)
            if "email" in data:
                data["email"] = _norm_email(data["email"])
            if "username" in data:
                data["username"] = _strip(data["username"])
        return data


class UserLoginSchema(Schema):
    email = fields.String(required=True)
    password = fields.String(required=True, load_only=True)

    @validates("email")
    def validate_email(self, value, **kwargs):
        if not value.strip():
            raise ValidationError("Email is required.")


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, validate=validate.Length(min=1))


class UserOutSchema(Schema):
    """Public user fields; the email column is ciphertext so views add the plaintext themselves."""
    id = fields.String(allow_none=False)
    username = fields.String()
    role = fields.String()
    created_at = fields.DateTime()
