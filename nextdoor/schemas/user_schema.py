from marshmallow import fields, EXCLUDE

from nextdoor.models.User import User, UserProfile
from nextdoor.extensions import ma


class UserSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = User
        load_instance = False
        unknown = EXCLUDE
        exclude = ("password_hash", "failed_login_attempts", "lock_until")

    id = fields.String(dump_only=True)
    email = fields.Email(required=True)
    display_name = fields.Method("get_display_name", dump_only=True)
    needs_display_name = fields.Method("get_needs_display_name", dump_only=True)
    has_password = fields.Method("get_has_password", dump_only=True)
    is_active = fields.Boolean(dump_only=True)
    email_confirmed = fields.Boolean(dump_only=True)
    last_login = fields.DateTime(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)

    def get_display_name(self, obj):
        return obj.display_name

    def get_needs_display_name(self, obj):
        # Drives the first-login prompt
        return not obj.display_name

    def get_has_password(self, obj):
        return bool(obj.password_hash)


class UserProfileSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = UserProfile
        include_fk = True

    id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    display_name = fields.String(required=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)
