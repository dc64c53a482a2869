from flask import Blueprint, g, jsonify, request

from nextdoor.errors import NotFoundError
from nextdoor.security_utils import coerce_uuid
from nextdoor.utils.decorator import current_user_id, require_user
from nextdoor.utils.logging_utils import log_context
from nextdoor.utils.model_utils.vote_utils import cast_vote, user_vote, vote_tally

vote_bp = Blueprint("vote_bp", __name__)


def _item_id(item_id):
    uid = coerce_uuid(item_id)
    if uid is None:
        raise NotFoundError("Item not found")
    return uid


@vote_bp.route("/<item_type>/<item_id>", methods=["GET"])
def get_votes(item_type, item_id):
    item_uuid = _item_id(item_id)
    viewer_vote = user_vote(item_type, item_uuid, current_user_id(optional=True))
    return jsonify({
        "item_type": item_type,
        "item_id": str(item_uuid),
        "vote_count": vote_tally(item_type, item_uuid),
        "user_vote": viewer_vote.value if viewer_vote else None,
    }), 200


@vote_bp.route("/<item_type>/<item_id>", methods=["POST"])
@require_user(message="Please log in to vote")
def post_vote(item_type, item_id):
    data = request.get_json(silent=True) or {}
    item_uuid = _item_id(item_id)
    with log_context(module="vote_route", action="vote"):
        result = cast_vote(item_type, item_uuid, g.user.id, data.get("vote_type"))
        return jsonify(result.to_dict()), 200
