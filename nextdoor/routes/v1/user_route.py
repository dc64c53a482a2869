# routes/v1/user_route.py

from flask import Blueprint, g, jsonify, request

from nextdoor.errors import NotFoundError
from nextdoor.schemas import UserProfileSchema
from nextdoor.security_utils import audit_log, coerce_uuid
from nextdoor.utils.decorator import require_user
from nextdoor.utils.logging_utils import get_logger, log_context
from nextdoor.utils.model_utils.community_utils import (
    get_community_by_slug,
    leave_community,
    list_user_communities,
)
from nextdoor.utils.model_utils.profile_utils import get_user_activity, set_user_display_name

user_bp = Blueprint("user_bp", __name__)


@user_bp.route("/me/communities", methods=["GET"])
@require_user()
def my_communities():
    return jsonify({"communities": list_user_communities(g.user.id)}), 200


@user_bp.route("/me/communities/<slug>", methods=["DELETE"])
@require_user()
def leave_my_community(slug):
    community = get_community_by_slug(slug)
    removed = leave_community(community, g.user.id)
    return jsonify({
        "message": f"You have left {community.name}",
        "removed": removed,
    }), 200


@user_bp.route("/me/display-name", methods=["PUT", "POST"])
@require_user()
def update_display_name():
    logger = get_logger("auth")
    data = request.get_json(silent=True) or {}
    with log_context(module="user_route", action="display_name", actor_id=str(g.user.id)):
        profile = set_user_display_name(g.user.id, data.get("display_name") or "")
        audit_log("display_name_set", user_id=g.user.id)
        logger.info("Display name saved user_id=%s", g.user.id)
        return jsonify({
            "message": "Display name saved",
            "profile": UserProfileSchema().dump(profile),
        }), 200


@user_bp.route("/users/<user_id>/profile", methods=["GET"])
def user_profile(user_id):
    uid = coerce_uuid(user_id)
    activity = get_user_activity(uid) if uid else {}
    if not activity:
        raise NotFoundError("User not found")
    return jsonify(activity), 200
