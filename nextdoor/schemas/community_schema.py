from marshmallow import fields

from nextdoor.models.Community import Community, PostalSector
from nextdoor.extensions import ma


class PostalSectorSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = PostalSector
        exclude = ("created_at",)

    id = fields.Integer(dump_only=True)
    sector_code = fields.String(required=True)
    postal_district = fields.Integer(required=True)
    district_name = fields.String(required=True)
    region = fields.String(required=True)
    general_locations = fields.String(allow_none=True)


class CommunitySchema(ma.SQLAlchemyAutoSchema):
    """Community header data. ``member_count`` and ``is_member`` come from the schema context."""

    class Meta:
        model = Community
        include_fk = True

    id = fields.String(dump_only=True)
    slug = fields.String(dump_only=True)
    name = fields.String(dump_only=True)
    area = fields.String(dump_only=True)
    region = fields.String(dump_only=True)
    sector_code = fields.String(dump_only=True)
    description = fields.String(dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    member_count = fields.Method("get_member_count", dump_only=True)
    is_member = fields.Method("get_is_member", dump_only=True)

    def get_member_count(self, obj):
        return self.context.get("member_count", 0)

    def get_is_member(self, obj):
        return bool(self.context.get("is_member", False))
