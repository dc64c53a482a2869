"""Up/down votes on posts and comments.

A user holds at most one vote per item. Casting a vote moves through three
cases: no vote yet inserts it, repeating the same vote removes it, and the
opposite vote flips it. ``delta`` is the change to the item's tally, which
clients apply optimistically.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, Optional

from sqlalchemy import case, func
from sqlalchemy.exc import IntegrityError

from nextdoor.errors import AppError, NotFoundError, ValidationFailed
from nextdoor.extensions import db
from nextdoor.models import Comment, CommentVote, Post, PostVote
from nextdoor.models.enumerations import VoteTarget, VoteType
from nextdoor.security_utils import audit_log
from nextdoor.utils.logging_utils import get_logger, log_context

# item type -> (vote model, foreign key column name, item model)
_TARGETS = {
    VoteTarget.POST: (PostVote, "post_id", Post),
    VoteTarget.COMMENT: (CommentVote, "comment_id", Comment),
}


@dataclass(frozen=True)
class VoteResult:
    user_vote: Optional[VoteType]
    delta: int
    vote_count: int

    def to_dict(self):
        return {
            "user_vote": self.user_vote.value if self.user_vote else None,
            "delta": self.delta,
            "vote_count": self.vote_count,
        }


def _resolve(item_type):
    try:
        target = VoteTarget(item_type)
    except ValueError:
        raise ValidationFailed(f"Unknown item type: {item_type}")
    return _TARGETS[target]


def _tally_expr(vote_model):
    return func.coalesce(
        func.sum(case((vote_model.vote_type == VoteType.UP, 1), else_=-1)), 0
    )


def vote_tally(item_type, item_id) -> int:
    vote_model, fk, _ = _resolve(item_type)
    total = (
        db.session.query(_tally_expr(vote_model))
        .filter(getattr(vote_model, fk) == item_id)
        .scalar()
    )
    return int(total or 0)


def vote_tallies(item_type, item_ids: Iterable) -> Dict:
    """Tallies for many items in one query; items without votes are omitted."""
    ids = list(item_ids)
    if not ids:
        return {}
    vote_model, fk, _ = _resolve(item_type)
    column = getattr(vote_model, fk)
    rows = (
        db.session.query(column, _tally_expr(vote_model))
        .filter(column.in_(ids))
        .group_by(column)
        .all()
    )
    return {item_id: int(total) for item_id, total in rows}


def user_votes(item_type, item_ids: Iterable, user_id) -> Dict:
    ids = list(item_ids)
    if not ids or user_id is None:
        return {}
    vote_model, fk, _ = _resolve(item_type)
    column = getattr(vote_model, fk)
    rows = (
        db.session.query(column, vote_model.vote_type)
        .filter(column.in_(ids), vote_model.user_id == user_id)
        .all()
    )
    return {item_id: vote_type for item_id, vote_type in rows}


def user_vote(item_type, item_id, user_id) -> Optional[VoteType]:
    return user_votes(item_type, [item_id], user_id).get(item_id)


def cast_vote(item_type, item_id, user_id, vote_type) -> VoteResult:
    vote_model, fk, item_model = _resolve(item_type)
    try:
        vote_type = VoteType(vote_type)
    except ValueError:
        raise ValidationFailed("vote_type must be 'up' or 'down'")

    if db.session.get(item_model, item_id) is None:
        raise NotFoundError(f"{item_model.__name__} not found")

    logger = get_logger("forum")
    with log_context(module="vote_utils", item_type=str(item_type), item_id=str(item_id), actor_id=str(user_id)):
        existing = vote_model.query.filter(
            getattr(vote_model, fk) == item_id, vote_model.user_id == user_id
        ).first()

        try:
            if existing is None:
                db.session.add(vote_model(**{fk: item_id, "user_id": user_id, "vote_type": vote_type}))
                current = vote_type
                delta = 1 if vote_type == VoteType.UP else -1
                action = "insert"
            elif existing.vote_type == vote_type:
                db.session.delete(existing)
                current = None
                delta = -1 if vote_type == VoteType.UP else 1
                action = "remove"
            else:
                existing.vote_type = vote_type
                current = vote_type
                delta = 2 if vote_type == VoteType.UP else -2
                action = "switch"
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            logger.warning("Concurrent vote rejected")
            raise AppError("We couldn't record your vote.", title="Voting failed", status_code=409)

        tally = vote_tally(item_type, item_id)
        logger.info("Vote %s type=%s delta=%s tally=%s", action, vote_type.value, delta, tally)
        audit_log(f"vote.{action}", user_id=user_id, detail=f"{item_type}:{item_id}:{vote_type.value}")
        return VoteResult(user_vote=current, delta=delta, vote_count=tally)
