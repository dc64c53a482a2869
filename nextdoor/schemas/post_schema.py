from marshmallow import fields, EXCLUDE
from marshmallow_enum import EnumField

from nextdoor.models.Forum import Comment, Post
from nextdoor.models.enumerations import PostTag
from nextdoor.extensions import ma


def _vote_value(vote):
    return vote.value if vote is not None else None


class CommentSchema(ma.SQLAlchemyAutoSchema):
    class Meta:
        model = Comment
        include_fk = True
        unknown = EXCLUDE

    id = fields.String(dump_only=True)
    post_id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    author = fields.String(dump_only=True)
    body = fields.String(required=True)
    created_at = fields.DateTime(dump_only=True)
    vote_count = fields.Method("get_vote_count", dump_only=True)
    user_vote = fields.Method("get_user_vote", dump_only=True)

    def get_vote_count(self, obj):
        return self.context.get("comment_totals", {}).get(obj.id, 0)

    def get_user_vote(self, obj):
        return _vote_value(self.context.get("comment_votes", {}).get(obj.id))


class PostSchema(ma.SQLAlchemyAutoSchema):
    """Feed entry. Vote totals and the viewer's votes are read from the schema context
    built by ``post_utils.feed_vote_context``."""

    class Meta:
        model = Post
        include_fk = True
        unknown = EXCLUDE

    id = fields.String(dump_only=True)
    community_id = fields.String(dump_only=True)
    user_id = fields.String(dump_only=True)
    author = fields.String(dump_only=True)
    title = fields.String(required=True)
    body = fields.String(required=True)
    tag = EnumField(PostTag, by_value=True)
    created_at = fields.DateTime(dump_only=True)
    comments = fields.Nested(CommentSchema, many=True, dump_only=True)
    vote_count = fields.Method("get_vote_count", dump_only=True)
    user_vote = fields.Method("get_user_vote", dump_only=True)

    def get_vote_count(self, obj):
        return self.context.get("post_totals", {}).get(obj.id, 0)

    def get_user_vote(self, obj):
        return _vote_value(self.context.get("post_votes", {}).get(obj.id))
