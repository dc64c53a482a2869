from __future__ import annotations

from typing import Any, Dict

import requests
from flask import current_app

from nextdoor.errors import ServiceMisconfigured, UpstreamError
from nextdoor.utils.logging_utils import get_logger

ONEMAP_DEFAULT_URL = "https://www.onemap.gov.sg/api/common/elastic/search"


def search_postal_code(postal_code: str) -> Dict[str, Any]:
    """Query the OneMap elastic search endpoint for ``postal_code``.

    Returns the decoded JSON body (``{"found": n, "results": [...]}``).
    Raises ``ServiceMisconfigured`` when no API token is set and
    ``UpstreamError`` when OneMap answers with a non-2xx status or cannot be
    reached.
    """
    logger = get_logger("location")
    token = current_app.config.get("ONEMAP_API_TOKEN")
    if not token:
        logger.error("search_postal_code: ONEMAP_API_TOKEN is not set")
        raise ServiceMisconfigured("OneMap API token is not configured. Please contact support.")

    url = current_app.config.get("ONEMAP_SEARCH_URL") or ONEMAP_DEFAULT_URL
    params = {
        "searchVal": postal_code,
        "returnGeom": "Y",
        "getAddrDetails": "Y",
        "pageNum": 1,
    }
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }

    try:
        logger.debug("search_postal_code: GET %s searchVal=%s", url, postal_code)
        resp = requests.get(url, params=params, headers=headers,
                            timeout=current_app.config.get("ONEMAP_TIMEOUT", 10))
    except requests.RequestException as exc:
        logger.error("search_postal_code: request exception code=%s err=%s", postal_code, exc, exc_info=True)
        raise UpstreamError("Unable to reach OneMap. Please try again later.", details=str(exc))

    if not resp.ok:
        snippet = (resp.text or "")[:300]
        logger.warning("search_postal_code: upstream failure status=%s body=%r", resp.status_code, snippet)
        raise UpstreamError(
            f"OneMap API error: {resp.status_code} {resp.reason or ''}".rstrip(),
            status_code=resp.status_code,
            details=snippet,
        )

    try:
        data = resp.json()
    except ValueError:
        logger.warning("search_postal_code: non-JSON body from OneMap")
        raise UpstreamError("OneMap returned an unreadable response")

    logger.info("search_postal_code: code=%s found=%s", postal_code, data.get("found"))
    return data
