from flask import Blueprint

community_bp = Blueprint('community_bp', __name__)

from nextdoor.routes.v1.community import (
    community_route,
    post_route,
    group_buy_route,
)
