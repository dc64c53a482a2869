from __future__ import annotations

from typing import Any, Dict, List, Optional

from nextdoor.errors import NotFoundError, ValidationFailed
from nextdoor.extensions import db
from nextdoor.models import Comment, Community, Post, User
from nextdoor.models.enumerations import PostTag, VoteTarget
from nextdoor.utils.logging_utils import get_logger, log_context

from .base import create_instance
from .profile_utils import resolve_author_name
from .vote_utils import user_votes, vote_tallies

# Tabs offered above the feed; Lost & Found and Food posts only show under "All"
POST_TABS = ("All", PostTag.GENERAL.value, PostTag.ANNOUNCEMENT.value, PostTag.BUY_SELL.value,
             PostTag.QUESTION.value, PostTag.NOTICE.value)


def parse_tag(tag: Optional[str]) -> PostTag:
    if tag is None or tag == "":
        return PostTag.GENERAL
    try:
        return PostTag(tag)
    except ValueError:
        raise ValidationFailed(f"Unknown tag: {tag}")


def get_post(post_id, community: Optional[Community] = None) -> Post:
    post = db.session.get(Post, post_id) if post_id is not None else None
    if post is None or (community is not None and post.community_id != community.id):
        raise NotFoundError("Post not found")
    return post


def create_post(community: Community, user: User, title: str, body: str, tag: Optional[str] = None) -> Post:
    title = (title or "").strip()
    body = (body or "").strip()
    if not title or not body:
        raise ValidationFailed("Please add a title and some content", title="Missing Information")

    with log_context(module="post_utils", action="create_post", community=community.slug, actor_id=str(user.id)):
        post = create_instance(
            Post,
            actor_id=user.id,
            event_name="post.create",
            community_id=community.id,
            user_id=user.id,
            author=resolve_author_name(user),
            title=title,
            body=body,
            tag=parse_tag(tag),
        )
        get_logger("forum").info("Post created id=%s tag=%s", post.id, post.tag.value)
        return post


def add_comment(post: Post, user: User, body: str) -> Comment:
    body = (body or "").strip()
    if not body:
        raise ValidationFailed("Comment cannot be empty")

    with log_context(module="post_utils", action="add_comment", post_id=str(post.id), actor_id=str(user.id)):
        comment = create_instance(
            Comment,
            actor_id=user.id,
            event_name="comment.create",
            post_id=post.id,
            user_id=user.id,
            author=resolve_author_name(user),
            body=body,
        )
        get_logger("forum").info("Comment created id=%s", comment.id)
        return comment


def list_posts(community: Community, tag: Optional[str] = None) -> List[Post]:
    query = Post.query.filter_by(community_id=community.id)
    if tag and tag != "All":
        query = query.filter(Post.tag == parse_tag(tag))
    return query.order_by(Post.created_at.desc()).all()


def tag_counts(posts: List[Post]) -> Dict[str, int]:
    counts = {tag.value: 0 for tag in PostTag}
    for post in posts:
        counts[post.tag.value] += 1
    counts["total"] = len(posts)
    return counts


def feed_vote_context(posts: List[Post], viewer_id=None) -> Dict[str, Any]:
    """Vote tallies and the viewer's own votes for a page of posts and their comments.

    Passed as marshmallow context to ``PostSchema`` / ``CommentSchema``.
    """
    post_ids = [p.id for p in posts]
    comment_ids = [c.id for p in posts for c in p.comments]
    return {
        "post_totals": vote_tallies(VoteTarget.POST, post_ids),
        "comment_totals": vote_tallies(VoteTarget.COMMENT, comment_ids),
        "post_votes": user_votes(VoteTarget.POST, post_ids, viewer_id),
        "comment_votes": user_votes(VoteTarget.COMMENT, comment_ids, viewer_id),
    }
