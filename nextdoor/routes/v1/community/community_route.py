from flask import g, jsonify

from nextdoor.routes.v1.community import community_bp
from nextdoor.schemas import CommunitySchema
from nextdoor.utils.decorator import current_user_id, load_community, require_user
from nextdoor.utils.logging_utils import log_context
from nextdoor.utils.model_utils.community_utils import (
    is_member,
    join_community,
    leave_community,
    list_members,
    member_count,
)


@community_bp.route("/<slug>", methods=["GET"])
@load_community
def get_community(community):
    viewer_id = current_user_id(optional=True)
    schema = CommunitySchema()
    schema.context = {
        "member_count": member_count(community),
        "is_member": is_member(community, viewer_id),
    }
    return jsonify(schema.dump(community)), 200


@community_bp.route("/<slug>/membership", methods=["POST"])
@require_user(message="Please log in to join this community")
@load_community
def join(community):
    with log_context(module="community_route", action="join", community=community.slug):
        join_community(community, g.user.id)
        return jsonify({
            "title": "Joined Successfully!",
            "message": f"Welcome to {community.name}",
            "member_count": member_count(community),
        }), 201


@community_bp.route("/<slug>/membership", methods=["DELETE"])
@require_user()
@load_community
def leave(community):
    with log_context(module="community_route", action="leave", community=community.slug):
        removed = leave_community(community, g.user.id)
        return jsonify({
            "message": f"You have left {community.name}",
            "removed": removed,
            "member_count": member_count(community),
        }), 200


@community_bp.route("/<slug>/members", methods=["GET"])
@load_community
def members(community):
    rows = list_members(community)
    return jsonify({"members": rows, "count": len(rows)}), 200
