from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import func

from nextdoor.errors import NotFoundError
from nextdoor.extensions import db
from nextdoor.models import Community, CommunityMember, PostalSector, User
from nextdoor.utils.logging_utils import get_logger, log_context

from .base import create_instance, delete_instance
from .profile_utils import initials, member_display_name


def get_community_by_slug(slug: str) -> Community:
    community = Community.query.filter_by(slug=slug).first()
    if community is None:
        raise NotFoundError("Community not found", title="Community not found")
    return community


def member_count(community: Community) -> int:
    return (
        db.session.query(func.count(CommunityMember.id))
        .filter(CommunityMember.community_id == community.id)
        .scalar()
        or 0
    )


def is_member(community: Community, user_id) -> bool:
    if user_id is None:
        return False
    return (
        CommunityMember.query.filter_by(community_id=community.id, user_id=user_id).first()
        is not None
    )


def join_community(community: Community, user_id) -> CommunityMember:
    logger = get_logger("community")
    with log_context(module="community_utils", action="join", community=community.slug, actor_id=str(user_id)):
        member = create_instance(
            CommunityMember,
            actor_id=user_id,
            event_name="community.join",
            conflict_message="You're already a member of this community",
            conflict_title="Already a Member",
            community_id=community.id,
            user_id=user_id,
        )
        logger.info("User joined community slug=%s", community.slug)
        return member


def leave_community(community: Community, user_id) -> bool:
    logger = get_logger("community")
    with log_context(module="community_utils", action="leave", community=community.slug, actor_id=str(user_id)):
        member = CommunityMember.query.filter_by(community_id=community.id, user_id=user_id).first()
        removed = delete_instance(member, actor_id=user_id, event_name="community.leave")
        logger.info("Leave community slug=%s removed=%s", community.slug, removed)
        return removed


def list_members(community: Community) -> List[Dict[str, Any]]:
    rows = (
        db.session.query(CommunityMember, User)
        .outerjoin(User, User.id == CommunityMember.user_id)
        .filter(CommunityMember.community_id == community.id)
        .order_by(CommunityMember.joined_at.desc())
        .all()
    )
    members = []
    for member, user in rows:
        name = member_display_name(user, member.user_id)
        members.append({
            "user_id": str(member.user_id),
            "display_name": name,
            "initials": initials(name),
            "joined_at": member.joined_at.isoformat() if member.joined_at else None,
        })
    return members


def list_user_communities(user_id) -> List[Dict[str, Any]]:
    rows = (
        db.session.query(CommunityMember, Community)
        .join(Community, Community.id == CommunityMember.community_id)
        .filter(CommunityMember.user_id == user_id)
        .order_by(CommunityMember.joined_at.desc())
        .all()
    )
    return [
        {
            "id": str(community.id),
            "name": community.name,
            "slug": community.slug,
            "area": community.area,
            "region": community.region,
            "joined_at": member.joined_at.isoformat() if member.joined_at else None,
        }
        for member, community in rows
    ]


def region_stats() -> Dict[str, Any]:
    """Members and communities per region, with per-sector member counts for the map."""
    per_community = (
        db.session.query(
            Community.id,
            Community.region,
            Community.sector_code,
            func.count(CommunityMember.id).label("members"),
        )
        .outerjoin(CommunityMember, CommunityMember.community_id == Community.id)
        .group_by(Community.id, Community.region, Community.sector_code)
        .all()
    )

    sector_members: Dict[str, int] = {}
    regions: Dict[str, Dict[str, Any]] = {}
    for _, region, sector_code, members in per_community:
        bucket = regions.setdefault(region or "Unknown", {"total_members": 0, "total_communities": 0})
        bucket["total_members"] += members
        bucket["total_communities"] += 1
        if sector_code:
            sector_members[sector_code] = sector_members.get(sector_code, 0) + members

    for sector in PostalSector.query.order_by(PostalSector.postal_district, PostalSector.sector_code).all():
        bucket = regions.setdefault(sector.region, {"total_members": 0, "total_communities": 0})
        bucket.setdefault("sectors", []).append({
            "sector_code": sector.sector_code,
            "district_name": sector.district_name,
            "postal_district": sector.postal_district,
            "member_count": sector_members.get(sector.sector_code, 0),
        })

    for bucket in regions.values():
        bucket.setdefault("sectors", [])

    return {
        "regions": regions,
        "total_members": sum(bucket["total_members"] for bucket in regions.values()),
    }
