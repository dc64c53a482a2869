from marshmallow import fields, EXCLUDE
from marshmallow_enum import EnumField

from nextdoor.models.GroupBuy import GroupBuy, GroupBuyComment, GroupBuyParticipant
from nextdoor.models.enumerations import GroupBuyStatus
from nextdoor.extensions import ma
from nextdoor.utils.model_utils import group_buy_utils
from nextdoor.utils.model_utils.profile_utils import member_display_name
from nextdoor.utils.share import category_display_name


class GroupBuyParticipantSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = GroupBuyParticipant
        include_fk = True

    id = fields.String(dump_only=True)
    group_buy_id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    quantity_requested = fields.Integer(dump_only=True)
    joined_at = fields.DateTime(dump_only=True)
    display_name = fields.Method("get_display_name", dump_only=True)

    def get_display_name(self, obj):
        return member_display_name(obj.user, obj.user_id)


class GroupBuyCommentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = GroupBuyComment
        include_fk = True
        unknown = EXCLUDE

    id = fields.String(dump_only=True)
    group_buy_id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    comment = fields.String(required=True)
    created_at = fields.DateTime(dump_only=True)
    author = fields.Method("get_author", dump_only=True)

    def get_author(self, obj):
        return member_display_name(obj.user, obj.user_id)


class GroupBuySchema(ma.SQLAlchemyAutoSchema):
    """Group buy card. Per-viewer flags come from the ``participation`` context entry."""

    class Meta:
        model = GroupBuy
        include_fk = True
        unknown = EXCLUDE

    id = fields.String(dump_only=True)
    community_id = fields.String(dump_only=True)
    organizer_id = fields.String(dump_only=True)
    title = fields.String(dump_only=True)
    description = fields.String(dump_only=True)
    category = fields.String(dump_only=True)
    target_quantity = fields.Integer(dump_only=True)
    price_individual = fields.Float(dump_only=True)
    price_group = fields.Float(dump_only=True)
    deadline = fields.Date(dump_only=True)
    pickup_location = fields.String(dump_only=True)
    status = EnumField(GroupBuyStatus, by_value=True, dump_only=True)
    created_at = fields.DateTime(dump_only=True)
    updated_at = fields.DateTime(dump_only=True)

    category_name = fields.Method("get_category_name", dump_only=True)
    organizer_name = fields.Method("get_organizer_name", dump_only=True)
    current_quantity = fields.Method("get_current_quantity", dump_only=True)
    progress_percent = fields.Method("get_progress_percent", dump_only=True)
    savings = fields.Method("get_savings", dump_only=True)
    savings_percent = fields.Method("get_savings_percent", dump_only=True)
    deadline_label = fields.Method("get_deadline_label", dump_only=True)
    is_participant = fields.Method("get_is_participant", dump_only=True)
    is_organizer = fields.Method("get_is_organizer", dump_only=True)

    def get_category_name(self, obj):
        return category_display_name(obj.category)

    def get_organizer_name(self, obj):
        return group_buy_utils.organizer_name(obj)

    def get_current_quantity(self, obj):
        return obj.current_quantity

    def get_progress_percent(self, obj):
        return group_buy_utils.progress_percent(obj.current_quantity, obj.target_quantity)

    def get_savings(self, obj):
        return group_buy_utils.savings(obj.price_individual, obj.price_group)

    def get_savings_percent(self, obj):
        return group_buy_utils.savings_percent(obj.price_individual, obj.price_group)

    def get_deadline_label(self, obj):
        return group_buy_utils.format_deadline(obj.deadline)

    def _participation(self, obj):
        return self.context.get("participation", {}).get(str(obj.id), {})

    def get_is_participant(self, obj):
        return bool(self._participation(obj).get("is_participant", False))

    def get_is_organizer(self, obj):
        return bool(self._participation(obj).get("is_organizer", False))


class GroupBuyDetailSchema(GroupBuySchema):
    participants = fields.Nested(GroupBuyParticipantSchema, many=True, dump_only=True)
    comments = fields.Nested(GroupBuyCommentSchema, many=True, dump_only=True)
