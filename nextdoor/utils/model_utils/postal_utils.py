from __future__ import annotations

from typing import List, Optional

from sqlalchemy.exc import IntegrityError

from nextdoor.extensions import db
from nextdoor.models import Community, PostalSector
from nextdoor.utils.logging_utils import get_logger
from nextdoor.utils.postal import sector_code_for


def get_postal_sector_from_code(postal_code: str) -> Optional[PostalSector]:
    sector_code = sector_code_for(postal_code)
    get_logger("location").info("Looking up postal sector code=%s sector=%s", postal_code, sector_code)
    sector = PostalSector.query.filter_by(sector_code=sector_code).first()
    if sector is None:
        get_logger("location").info("No postal sector found for sector_code=%s", sector_code)
    return sector


def get_postal_sectors_by_region(region: str) -> List[PostalSector]:
    return (
        PostalSector.query.filter_by(region=region)
        .order_by(PostalSector.postal_district.asc(), PostalSector.sector_code.asc())
        .all()
    )


def get_all_regions() -> List[str]:
    rows = db.session.query(PostalSector.region).distinct().order_by(PostalSector.region.asc()).all()
    return [region for (region,) in rows]


def get_or_create_community(slug: str, name: str, sector: PostalSector) -> Community:
    """Return the community for ``slug``, creating it from the sector on first lookup."""
    community = Community.query.filter_by(slug=slug).first()
    if community:
        return community

    community = Community(
        slug=slug,
        name=name,
        area=sector.district_name,
        region=sector.region,
        sector_code=sector.sector_code,
        description=f"Neighbours around {sector.general_locations or sector.district_name}",
    )
    db.session.add(community)
    try:
        db.session.commit()
    except IntegrityError:
        # Another lookup created the same slug first
        db.session.rollback()
        return Community.query.filter_by(slug=slug).one()
    get_logger("community").info("Created community slug=%s sector=%s", slug, sector.sector_code)
    return community
