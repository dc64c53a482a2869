from flask import Blueprint, jsonify

from nextdoor.utils.model_utils.community_utils import region_stats

stats_bp = Blueprint("stats_bp", __name__)


@stats_bp.route("/map", methods=["GET"])
def map_stats():
    """Member and community totals per region for the home page map."""
    return jsonify(region_stats()), 200
