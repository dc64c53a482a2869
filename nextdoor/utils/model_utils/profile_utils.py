from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from nextdoor.errors import ValidationFailed
from nextdoor.extensions import db
from nextdoor.models import Comment, Community, CommunityMember, Post, User, UserProfile
from nextdoor.utils.logging_utils import get_logger, log_context

from .base import _serialize_value, create_instance, update_instance

DISPLAY_NAME_MIN = 2
DISPLAY_NAME_MAX = 30
RECENT_ACTIVITY_LIMIT = 5


def validate_display_name(name: Optional[str]) -> Tuple[bool, Optional[str]]:
    if not name or not name.strip():
        return False, "Display name cannot be empty"
    trimmed = name.strip()
    if len(trimmed) < DISPLAY_NAME_MIN:
        return False, "Display name must be at least 2 characters"
    if len(trimmed) > DISPLAY_NAME_MAX:
        return False, "Display name must be 30 characters or less"
    return True, None


def get_display_name_fallback(email: Optional[str] = None, user_id: Optional[Any] = None) -> str:
    if email:
        return email.split("@")[0]
    if user_id:
        return f"Resident{str(user_id)[-4:].upper()}"
    return "Anonymous User"


def get_user_display_name(user_id) -> Optional[str]:
    profile = UserProfile.query.filter_by(user_id=user_id).first()
    return profile.display_name if profile else None


def set_user_display_name(user_id, display_name: str) -> UserProfile:
    """Validate and store a display name, creating the profile row on first use."""
    ok, error = validate_display_name(display_name)
    if not ok:
        raise ValidationFailed(error, title="Invalid display name")

    name = display_name.strip()
    logger = get_logger("auth")
    with log_context(module="profile_utils", action="set_display_name", actor_id=str(user_id)):
        profile = UserProfile.query.filter_by(user_id=user_id).first()
        if profile:
            logger.info("Updating display name user_id=%s", _serialize_value(user_id))
            return update_instance(profile, actor_id=user_id, event_name="profile.display_name.update",
                                   display_name=name)
        logger.info("Creating profile user_id=%s", _serialize_value(user_id))
        return create_instance(UserProfile, actor_id=user_id, event_name="profile.create",
                               user_id=user_id, display_name=name)


def resolve_author_name(user: User) -> str:
    """Name stamped on posts and comments."""
    if user.display_name:
        return user.display_name
    if user.email:
        return user.email.split("@")[0]
    return "User"


def member_display_name(user: Optional[User], user_id=None) -> str:
    if user is None:
        return get_display_name_fallback(None, user_id)
    return user.display_name or get_display_name_fallback(user.email, user.id)


def initials(name: str) -> str:
    return (name or "")[:2].upper()


def get_user_activity(user_id) -> Dict[str, Any]:
    """Profile card data: recent posts, recent comments and joined communities."""
    user = db.session.get(User, user_id)
    if user is None:
        return {}

    posts = (
        Post.query.filter_by(user_id=user_id)
        .order_by(Post.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    comments = (
        Comment.query.filter_by(user_id=user_id)
        .order_by(Comment.created_at.desc())
        .limit(RECENT_ACTIVITY_LIMIT)
        .all()
    )
    memberships = (
        db.session.query(CommunityMember, Community)
        .join(Community, Community.id == CommunityMember.community_id)
        .filter(CommunityMember.user_id == user_id)
        .order_by(CommunityMember.joined_at.desc())
        .all()
    )

    def _community_label(community):
        return community.name if community else "Unknown Community"

    return {
        "user_id": str(user.id),
        "display_name": member_display_name(user),
        "joined_at": user.created_at.isoformat() if user.created_at else None,
        "recent_posts": [
            {
                "id": str(p.id),
                "title": p.title,
                "tag": p.tag.value,
                "created_at": p.created_at.isoformat() if p.created_at else None,
                "community_name": _community_label(p.community),
                "community_slug": p.community_slug,
            }
            for p in posts
        ],
        "recent_comments": [
            {
                "id": str(c.id),
                "body": c.body,
                "created_at": c.created_at.isoformat() if c.created_at else None,
                "post_id": str(c.post_id),
                "post_title": c.post.title if c.post else "Unknown Post",
                "community_name": _community_label(c.post.community if c.post else None),
            }
            for c in comments
        ],
        "communities": [
            {
                "name": community.name,
                "slug": community.slug,
                "area": community.area,
                "region": community.region,
                "joined_at": member.joined_at.isoformat() if member.joined_at else None,
            }
            for member, community in memberships
        ],
    }
