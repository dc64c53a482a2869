"""Postal code -> community resolution.

Combines the postal sector table, a OneMap search and the address
heuristics into a single ``LocationData`` result, creating the community
row the first time a residential address in it is looked up.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional

from nextdoor.errors import NotFoundError, ValidationFailed
from nextdoor.models import Community, PostalSector
from nextdoor.utils.classification import (
    AddressClassification,
    PropertyClassification,
    classify_address,
    classify_property,
)
from nextdoor.utils.logging_utils import get_logger, log_context
from nextdoor.utils.model_utils.postal_utils import get_or_create_community, get_postal_sector_from_code
from nextdoor.utils.postal import (
    generate_community_name,
    generate_community_slug,
    is_valid_postal_code,
    normalize_postal_code,
)

from . import onemap_service


@dataclass
class LocationData:
    postal_code: str
    block: str
    street: str
    area: str
    community: str
    community_slug: str
    region: str
    latitude: Optional[float]
    longitude: Optional[float]
    full_address: str
    building_name: str
    address_classification: AddressClassification
    property_classification: PropertyClassification
    postal_sector: PostalSector
    community_id: Optional[Any] = None

    @property
    def can_join(self) -> bool:
        return self.address_classification.is_residential and self.community_id is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "postal_code": self.postal_code,
            "block": self.block,
            "street": self.street,
            "area": self.area,
            "community": self.community,
            "community_slug": self.community_slug,
            "community_id": str(self.community_id) if self.community_id else None,
            "region": self.region,
            "latitude": self.latitude,
            "longitude": self.longitude,
            "full_address": self.full_address,
            "building_name": self.building_name,
            "address_classification": self.address_classification.to_dict(),
            "property_classification": self.property_classification.to_dict(),
            "postal_sector": self.postal_sector.to_dict(),
            "can_join": self.can_join,
        }


def _coordinate(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return None if number != number else number


def lookup_postal_code(postal_code: str) -> LocationData:
    postal_code = normalize_postal_code(postal_code)
    logger = get_logger("location")

    if not is_valid_postal_code(postal_code):
        raise ValidationFailed("Please enter a valid 6-digit Singapore postal code")

    with log_context(module="location_service", postal_code=postal_code):
        sector = get_postal_sector_from_code(postal_code)
        if sector is None:
            raise NotFoundError("Invalid postal code. Please check and try again.")

        data = onemap_service.search_postal_code(postal_code)
        results = data.get("results") or []
        if not data.get("found") or not results:
            logger.info("No OneMap results for postal code")
            raise NotFoundError("We couldn't find detailed information for this postal code. Please try again.")

        result = results[0]
        block = result.get("BLK_NO") or ""
        road_name = result.get("ROAD_NAME") or ""
        street = road_name or "Unknown Street"
        full_address = result.get("ADDRESS") or "Unknown Address"
        building_name = result.get("BUILDING") or ""

        address_classification = classify_address(building_name, full_address, street)
        property_classification = classify_property(building_name, full_address)

        community_name = generate_community_name(
            sector, block, building_name, road_name, address_classification.is_commercial
        )
        community_slug = generate_community_slug(community_name)

        community: Optional[Community] = None
        if address_classification.is_residential:
            community = get_or_create_community(community_slug, community_name, sector)
        else:
            logger.info("Commercial address, no community created slug=%s", community_slug)

        logger.info("Resolved postal code to community slug=%s commercial=%s",
                    community_slug, address_classification.is_commercial)

        return LocationData(
            postal_code=postal_code,
            block=block,
            street=street,
            area=sector.district_name,
            community=community_name,
            community_slug=community_slug,
            region=sector.region,
            latitude=_coordinate(result.get("LATITUDE")),
            longitude=_coordinate(result.get("LONGITUDE")),
            full_address=full_address,
            building_name=building_name,
            address_classification=address_classification,
            property_classification=property_classification,
            postal_sector=sector,
            community_id=community.id if community else None,
        )
