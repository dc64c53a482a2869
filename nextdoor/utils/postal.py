"""Postal code parsing plus community name and slug generation."""

import re

POSTAL_CODE_RE = re.compile(r"[0-9]{6}")
_ROAD_SUFFIX_RE = re.compile(
    r"\b(STREET|ROAD|AVENUE|LANE|DRIVE|CLOSE|CRESCENT|PLACE|WALK|PARK|TERRACE)\b",
    re.IGNORECASE,
)
_DIGITS_RE = re.compile(r"\d+")
_NOT_SLUG_CHARS_RE = re.compile(r"[^a-z0-9\s-]")
_WHITESPACE_RE = re.compile(r"\s+")
_DASHES_RE = re.compile(r"-+")

BLOCK_RANGE_SIZE = 10


def normalize_postal_code(postal_code) -> str:
    return str(postal_code or "").strip()


def is_valid_postal_code(postal_code) -> bool:
    return bool(POSTAL_CODE_RE.fullmatch(normalize_postal_code(postal_code)))


def sector_code_for(postal_code) -> str:
    """First two digits of a postal code identify its sector."""
    return normalize_postal_code(postal_code)[:2]


def clean_road_name(road_name: str) -> str:
    return _ROAD_SUFFIX_RE.sub("", road_name or "").strip()


def block_range(block: str):
    """``("123A")`` -> ``(120, 129)``; None when the block has no digits."""
    match = _DIGITS_RE.search(block or "")
    if not match:
        return None
    start = (int(match.group(0)) // BLOCK_RANGE_SIZE) * BLOCK_RANGE_SIZE
    return start, start + BLOCK_RANGE_SIZE - 1


def generate_community_name(sector, block: str, building_name: str, road_name: str, is_commercial: bool) -> str:
    if is_commercial:
        return f"{sector.district_name} Commercial"

    # Named developments (condos, newer estates) get their own community
    if building_name and building_name != "NIL" and building_name.strip():
        return f"{building_name} Residents"

    # HDB estates are grouped in ranges of ten blocks along a road
    if block and road_name:
        rng = block_range(block)
        if rng:
            return f"{clean_road_name(road_name)} Blk {rng[0]}–{rng[1]}"

    if road_name:
        return f"{clean_road_name(road_name)} Community"

    return f"{sector.district_name} Community"


def generate_community_slug(community_name: str) -> str:
    slug = (community_name or "").lower()
    slug = _NOT_SLUG_CHARS_RE.sub("", slug)
    slug = _WHITESPACE_RE.sub("-", slug)
    slug = _DASHES_RE.sub("-", slug)
    return slug.strip("-")
