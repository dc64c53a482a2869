"""String heuristics that classify a OneMap address.

``classify_address`` decides whether an address is commercial (which
blocks community creation); ``classify_property`` produces the HDB /
Condo / Landed and zoning badges shown next to a lookup result.
"""

from dataclasses import asdict, dataclass

from nextdoor.models.enumerations import PropertyType, ZoningType

COMMERCIAL_KEYWORDS = (
    "tower",
    "plaza",
    "centre",
    "center",
    "square",
    "business park",
    "mall",
    "hotel",
    "atrium",
    "arcade",
    "hub",
    "retail",
    "office",
    "commercial",
    "shopping",
    "complex",
)

COMMERCIAL_STREETS = (
    "clemenceau",
    "orchard",
    "raffles",
    "bugis",
    "marina",
    "shenton",
    "tampines central",
    "paya lebar",
    "tanjong pagar",
    "robinson",
    "cecil",
    "battery",
    "collyer",
    "boat quay",
    "clarke quay",
)

CONDO_KEYWORDS = ("residences", "condominium", "suites", "ville")
INDUSTRIAL_KEYWORDS = ("industrial park", "factory", "technopark")

PROPERTY_TYPE_ICONS = {
    PropertyType.HDB: "🏠",
    PropertyType.CONDO: "🏢",
    PropertyType.LANDED: "🏡",
}

ZONING_TYPE_ICONS = {
    ZoningType.RESIDENTIAL: "🏘️",
    ZoningType.INDUSTRIAL: "🏭",
}


@dataclass(frozen=True)
class AddressClassification:
    is_commercial: bool
    is_residential: bool

    def to_dict(self):
        return asdict(self)


@dataclass(frozen=True)
class PropertyClassification:
    property_type: PropertyType
    zoning_type: ZoningType

    def to_dict(self):
        return {
            "property_type": self.property_type.value,
            "zoning_type": self.zoning_type.value,
            "property_icon": property_type_icon(self.property_type),
            "zoning_icon": zoning_type_icon(self.zoning_type),
        }


def _contains_any(text: str, needles) -> bool:
    return any(needle in text for needle in needles)


def classify_address(building_name: str, address: str, street: str) -> AddressClassification:
    building = (building_name or "").lower()
    full_address = (address or "").lower()
    street_lower = (street or "").lower()

    is_commercial = (
        _contains_any(building, COMMERCIAL_KEYWORDS)
        or _contains_any(full_address, COMMERCIAL_KEYWORDS)
        or _contains_any(street_lower, COMMERCIAL_STREETS)
    )
    return AddressClassification(is_commercial=is_commercial, is_residential=not is_commercial)


def classify_property(building_name: str, address: str) -> PropertyClassification:
    building_name = building_name or ""
    building = building_name.lower()

    if "blk" in building or building_name == "":
        property_type = PropertyType.HDB
    elif _contains_any(building, CONDO_KEYWORDS):
        property_type = PropertyType.CONDO
    elif building_name.strip() == "":
        property_type = PropertyType.LANDED
    else:
        property_type = PropertyType.HDB

    if _contains_any((address or "").lower(), INDUSTRIAL_KEYWORDS):
        zoning_type = ZoningType.INDUSTRIAL
    else:
        zoning_type = ZoningType.RESIDENTIAL

    return PropertyClassification(property_type=property_type, zoning_type=zoning_type)


def property_type_icon(property_type: PropertyType) -> str:
    return PROPERTY_TYPE_ICONS[PropertyType(property_type)]


def zoning_type_icon(zoning_type: ZoningType) -> str:
    return ZONING_TYPE_ICONS[ZoningType(zoning_type)]
