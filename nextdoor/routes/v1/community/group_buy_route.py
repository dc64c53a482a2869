from flask import current_app, g, jsonify, request

from nextdoor.routes.v1.community import community_bp
from nextdoor.schemas import GroupBuyCommentSchema, GroupBuyDetailSchema, GroupBuySchema
from nextdoor.security_utils import coerce_uuid
from nextdoor.utils.decorator import current_user_id, load_community, require_user
from nextdoor.utils.logging_utils import log_context
from nextdoor.utils.model_utils import group_buy_utils as gb
from nextdoor.utils.share import generate_share_message, group_buy_url, telegram_link, whatsapp_link


def _load(community, group_buy_id):
    return gb.get_group_buy(coerce_uuid(group_buy_id), community)


def _dump(schema, group_buys, viewer_id):
    rows = group_buys if schema.many else [group_buys]
    schema.context = {"participation": gb.participation_status(rows, viewer_id)}
    return schema.dump(group_buys)


@community_bp.route("/<slug>/group-buys", methods=["GET"])
@load_community
def list_group_buys(community):
    viewer_id = current_user_id(optional=True)
    view = request.args.get("view", "overview")
    group_buys = gb.list_group_buys(community, overview=(view == "overview"))
    for group_buy in group_buys:
        gb.refresh_status(group_buy)

    if view == "overview":
        group_buys = [item for item in group_buys if item.status in gb.OVERVIEW_STATUSES]
        return jsonify({"group_buys": _dump(GroupBuySchema(many=True), group_buys, viewer_id)}), 200

    active, past = gb.partition_group_buys(group_buys)
    return jsonify({
        "active": _dump(GroupBuySchema(many=True), active, viewer_id),
        "past": _dump(GroupBuySchema(many=True), past, viewer_id),
    }), 200


@community_bp.route("/<slug>/group-buys", methods=["POST"])
@require_user(message="Please log in to create group buys")
@load_community
def create_group_buy(community):
    form = request.get_json(silent=True) or {}
    with log_context(module="group_buy_route", action="create", community=community.slug):
        group_buy = gb.create_group_buy(community, g.user.id, form)
        return jsonify({
            "title": "Group Buy Created!",
            "message": "Your group buy has been created successfully",
            "group_buy": _dump(GroupBuySchema(), group_buy, g.user.id),
        }), 201


@community_bp.route("/<slug>/group-buys/<group_buy_id>", methods=["GET"])
@load_community
def get_group_buy(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    gb.refresh_status(group_buy)
    schema = GroupBuyDetailSchema()
    schema.context = {"participation": gb.participation_status([group_buy], current_user_id(optional=True))}
    return jsonify(schema.dump(group_buy)), 200


@community_bp.route("/<slug>/group-buys/<group_buy_id>/participants", methods=["POST"])
@require_user(message="Please log in to join group buys")
@load_community
def join_group_buy(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    with log_context(module="group_buy_route", action="join", community=community.slug):
        gb.join_group_buy(group_buy, g.user.id)
        return jsonify({
            "title": "Joined Successfully!",
            "message": "You've joined the group buy",
            "group_buy": _dump(GroupBuySchema(), group_buy, g.user.id),
        }), 201


@community_bp.route("/<slug>/group-buys/<group_buy_id>/participants", methods=["DELETE"])
@require_user()
@load_community
def leave_group_buy(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    with log_context(module="group_buy_route", action="leave", community=community.slug):
        removed = gb.leave_group_buy(group_buy, g.user.id)
        return jsonify({
            "message": "You've left the group buy",
            "removed": removed,
            "group_buy": _dump(GroupBuySchema(), group_buy, g.user.id),
        }), 200


@community_bp.route("/<slug>/group-buys/<group_buy_id>/complete", methods=["POST"])
@require_user()
@load_community
def complete_group_buy(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    gb.complete_group_buy(group_buy, g.user.id)
    return jsonify({
        "message": "Group buy marked as completed",
        "group_buy": _dump(GroupBuySchema(), group_buy, g.user.id),
    }), 200


@community_bp.route("/<slug>/group-buys/<group_buy_id>/comments", methods=["GET"])
@load_community
def list_group_buy_comments(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    return jsonify({"comments": GroupBuyCommentSchema(many=True).dump(group_buy.comments)}), 200


@community_bp.route("/<slug>/group-buys/<group_buy_id>/comments", methods=["POST"])
@require_user(message="Please log in to comment")
@load_community
def add_group_buy_comment(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    data = request.get_json(silent=True) or {}
    comment = gb.add_group_buy_comment(group_buy, g.user.id, data.get("comment"))
    return jsonify({
        "title": "Comment Added",
        "message": "Your comment has been posted",
        "comment": GroupBuyCommentSchema().dump(comment),
    }), 201


@community_bp.route("/<slug>/group-buys/<group_buy_id>/share", methods=["GET"])
@load_community
def share_group_buy(community, group_buy_id):
    group_buy = _load(community, group_buy_id)
    url = group_buy_url(current_app.config.get("APP_BASE_URL", ""), community.slug, group_buy.id)
    message = generate_share_message(group_buy, url)
    hashtag_message = generate_share_message(group_buy, url, with_hashtags=True)
    return jsonify({
        "url": url,
        "message": message,
        "telegram": telegram_link(hashtag_message),
        "whatsapp": whatsapp_link(hashtag_message),
    }), 200
