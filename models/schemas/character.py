from marshmallow import Schema, fields, validate

NAME_MIN_LENGTH = 6


class CharacterCreateSchema(Schema):
    name = fields.String(required=True, validate=validate.Length(min=NAME_MIN_LENGTH, max=255))
    last_name = fields.String(
        required=True, data_key="lastName", validate=validate.Length(min=NAME_MIN_LENGTH, max=255)
    )


class CharacterUpdateSchema(Schema):
    # All optional, but validate if present
    name = fields.String(validate=validate.Length(min=NAME_MIN_LENGTH, max=255))
    last_name = fields.String(data_key="lastName", validate=validate.Length(min=NAME_MIN_LENGTH, max=255))


class CharacterOutSchema(Schema):
    id = fields.String()
    name = fields.String()
    last_name = fields.String(data_key="lastName")
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
