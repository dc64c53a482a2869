"""Singapore planning areas and the region each belongs to."""

from typing import List

UNKNOWN = "Unknown"

SINGAPORE_REGIONS = {
    # Central Region
    "Ang Mo Kio": "Central",
    "Bishan": "Central",
    "Bukit Merah": "Central",
    "Bukit Timah": "Central",
    "Central Area": "Central",
    "Geylang": "Central",
    "Kallang": "Central",
    "Marine Parade": "Central",
    "Novena": "Central",
    "Queenstown": "Central",
    "Singapore River": "Central",
    "Toa Payoh": "Central",
    # East Region
    "Bedok": "East",
    "Changi": "East",
    "Pasir Ris": "East",
    "Tampines": "East",
    # North Region
    "Central Water Catchment": "North",
    "Lim Chu Kang": "North",
    "Mandai": "North",
    "Sembawang": "North",
    "Simpang": "North",
    "Sungei Kadut": "North",
    "Woodlands": "North",
    "Yishun": "North",
    # Northeast Region
    "Hougang": "Northeast",
    "North-Eastern Islands": "Northeast",
    "Punggol": "Northeast",
    "Seletar": "Northeast",
    "Sengkang": "Northeast",
    "Serangoon": "Northeast",
    # West Region
    "Boon Lay": "West",
    "Bukit Batok": "West",
    "Bukit Panjang": "West",
    "Choa Chu Kang": "West",
    "Clementi": "West",
    "Jurong East": "West",
    "Jurong West": "West",
    "Pioneer": "West",
    "Tengah": "West",
    "Tuas": "West",
    "Western Islands": "West",
    "Western Water Catchment": "West",
}

# Street keywords that do not contain a planning area name
_STREET_KEYWORDS = (
    ("ORCHARD", "Central Area"),
    ("MARINA", "Central Area"),
    ("RAFFLES", "Central Area"),
    ("BOAT QUAY", "Central Area"),
    ("CLARKE QUAY", "Central Area"),
    ("SENTOSA", "Central Area"),
    ("EAST COAST", "Marine Parade"),
    ("WEST COAST", "Clementi"),
)


def get_region_for_area(area_name: str) -> str:
    return SINGAPORE_REGIONS.get(area_name, UNKNOWN)


def get_areas_in_region(region: str) -> List[str]:
    return [area for area, area_region in SINGAPORE_REGIONS.items() if area_region == region]


def extract_area_from_street(street_name: str) -> str:
    """Best-effort planning area for a street name, or ``"Unknown"``.

    Area names are tried first in table order, so "ANG MO KIO AVENUE 3"
    resolves to Ang Mo Kio; known landmarks are tried after that.
    """
    street_upper = (street_name or "").upper()

    for area in SINGAPORE_REGIONS:
        if area.upper() in street_upper:
            return area

    for keyword, area in _STREET_KEYWORDS:
        if keyword in street_upper:
            return area

    return UNKNOWN
