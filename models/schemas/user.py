from marshmallow import Schema, fields, pre_load, validates, ValidationError

from models.role import Role

PASSWORD_MIN_LENGTH = 6


def _norm_email(v):
    return v.strip().lower() if isinstance(v, str) else v


class CredentialsSchema(Schema):
    """email + password, used for both registration and login."""
    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)

    @pre_load
    def normalize(self, data, **kwargs):
        if isinstance(data, dict) and "email" in data:
            data = dict(data)
            data["email"] = _norm_email(data["email"])
        return data

    @validates("password")
    def validate_password(self, value, **kwargs):
        if len(value) < PASSWORD_MIN_LENGTH:
            raise ValidationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters long.")


class RefreshSchema(Schema):
    refresh_token = fields.String(required=True, data_key="refreshToken")


class RoleUpdateSchema(Schema):
    role = fields.Enum(Role, by_value=True, required=True)


class UserOutSchema(Schema):
    id = fields.Integer()
    email = fields.String()
    role = fields.Enum(Role, by_value=True)
