from flask import Blueprint, jsonify, request

from nextdoor.errors import NotFoundError, ServiceMisconfigured, UpstreamError
from nextdoor.schemas import PostalSectorSchema
from nextdoor.services import onemap_service
from nextdoor.services.location_service import lookup_postal_code
from nextdoor.utils.logging_utils import get_logger, log_context
from nextdoor.utils.model_utils.postal_utils import get_all_regions, get_postal_sectors_by_region
from nextdoor.utils.regions import get_areas_in_region

location_bp = Blueprint("location_bp", __name__)
onemap_bp = Blueprint("onemap_bp", __name__)


@location_bp.route("/lookup", methods=["GET"])
def lookup():
    postal_code = request.args.get("postalCode", "")
    with log_context(module="location_route", action="lookup"):
        location = lookup_postal_code(postal_code)
        return jsonify(location.to_dict()), 200


@location_bp.route("/regions", methods=["GET"])
def regions():
    return jsonify({
        "regions": [
            {"name": region, "areas": get_areas_in_region(region)}
            for region in get_all_regions()
        ]
    }), 200


@location_bp.route("/regions/<region>/sectors", methods=["GET"])
def region_sectors(region):
    sectors = get_postal_sectors_by_region(region)
    if not sectors:
        raise NotFoundError(f"No postal sectors found for region {region}")
    return jsonify({"region": region, "sectors": PostalSectorSchema(many=True).dump(sectors)}), 200


@onemap_bp.route("/onemap-search", methods=["GET"])
def onemap_search():
    """Pass-through to the OneMap search API so the token stays server-side."""
    postal_code = request.args.get("postalCode")
    if not postal_code:
        return jsonify({"error": "Postal code is required"}), 400
    try:
        return jsonify(onemap_service.search_postal_code(postal_code)), 200
    except (ServiceMisconfigured, UpstreamError) as e:
        get_logger("location").warning("onemap-search failed status=%s", e.status_code)
        return jsonify({"error": e.message, "details": e.details}), e.status_code
