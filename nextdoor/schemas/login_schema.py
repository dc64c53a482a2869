from marshmallow import Schema, fields, validate, EXCLUDE


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True, validate=validate.Length(min=1))


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    password = fields.String(required=True, load_only=True)
    # Length is checked by validate_display_name so the messages stay consistent
    display_name = fields.String(required=True)


class EmailSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)


class ResetPasswordSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True)
    token = fields.String(required=True)
    password = fields.String(required=True, load_only=True)
