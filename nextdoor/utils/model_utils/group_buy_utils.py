from __future__ import annotations

import math
import re
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from nextdoor.errors import NotFoundError, PermissionDenied, ValidationFailed
from nextdoor.extensions import db
from nextdoor.models import Community, GroupBuy, GroupBuyComment, GroupBuyParticipant
from nextdoor.models.enumerations import GroupBuyCategory, GroupBuyStatus
from nextdoor.utils.logging_utils import get_logger, log_context

from .base import create_instance, delete_instance, update_instance

MIN_TARGET_QUANTITY = 2
MIN_DEADLINE_YEAR = 2024
OVERVIEW_STATUSES = (GroupBuyStatus.PENDING, GroupBuyStatus.SUCCESSFUL)

REQUIRED_FIELDS = (
    "title",
    "description",
    "category",
    "target_quantity",
    "price_individual",
    "price_group",
    "pickup_location",
    "deadline",
)

_DMY_RE = re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})")
_ISO_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")


def _today() -> date:
    return datetime.now(timezone.utc).date()


def parse_deadline(value, today: Optional[date] = None) -> date:
    """Accept ``DD/MM/YYYY`` (form input) or ``YYYY-MM-DD``; must fall after today."""
    today = today or _today()
    if isinstance(value, datetime):
        parsed = value.date()
    elif isinstance(value, date):
        parsed = value
    else:
        text = str(value or "").strip()
        iso = _ISO_RE.fullmatch(text)
        if iso:
            year, month, day = (int(part) for part in iso.groups())
        else:
            if len(text) != 10:
                raise ValidationFailed("Please enter a complete date (DD/MM/YYYY)", title="Invalid Date")
            dmy = _DMY_RE.fullmatch(text)
            if not dmy:
                raise ValidationFailed("Please enter a valid date", title="Invalid Date")
            day, month, year = (int(part) for part in dmy.groups())

        if not (1 <= day <= 31 and 1 <= month <= 12 and year >= MIN_DEADLINE_YEAR):
            raise ValidationFailed("Please enter a valid date", title="Invalid Date")
        try:
            parsed = date(year, month, day)
        except ValueError:
            raise ValidationFailed("Please enter a valid date", title="Invalid Date")

    if parsed <= today:
        raise ValidationFailed("Deadline must be in the future", title="Invalid Date")
    return parsed


def _to_float(value) -> Optional[float]:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _to_int(value) -> Optional[int]:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return None


def validate_group_buy_form(form: Dict[str, Any], today: Optional[date] = None) -> Dict[str, Any]:
    """Turn raw form input into model attributes, raising on the first problem."""
    deadline = parse_deadline(form.get("deadline"), today=today)

    missing = [name for name in REQUIRED_FIELDS if form.get(name) in (None, "")]
    if missing or any(not str(form.get(name)).strip() for name in ("title", "description", "pickup_location")):
        raise ValidationFailed("Please fill in all required fields", title="Missing Information",
                               details={"missing": missing})

    price_individual = _to_float(form.get("price_individual"))
    price_group = _to_float(form.get("price_group"))
    if price_individual is None or price_group is None or price_individual <= 0 or price_group <= 0:
        raise ValidationFailed("Please enter valid prices", title="Invalid Prices")
    if price_group >= price_individual:
        raise ValidationFailed("Group price must be lower than individual price", title="Invalid Pricing")

    target_quantity = _to_int(form.get("target_quantity"))
    if target_quantity is None or target_quantity < MIN_TARGET_QUANTITY:
        raise ValidationFailed("Target quantity must be at least 2 people", title="Invalid Target Quantity")

    category = str(form.get("category")).strip().lower()
    if category not in {c.value for c in GroupBuyCategory}:
        raise ValidationFailed(f"Unknown category: {category}", title="Invalid Category")

    return {
        "title": str(form["title"]).strip(),
        "description": str(form["description"]).strip(),
        "category": category,
        "target_quantity": target_quantity,
        "price_individual": round(price_individual, 2),
        "price_group": round(price_group, 2),
        "pickup_location": str(form["pickup_location"]).strip(),
        "deadline": deadline,
    }


def create_group_buy(community: Community, organizer_id, form: Dict[str, Any]) -> GroupBuy:
    attributes = validate_group_buy_form(form)
    with log_context(module="group_buy_utils", action="create", community=community.slug, actor_id=str(organizer_id)):
        group_buy = create_instance(
            GroupBuy,
            actor_id=organizer_id,
            event_name="groupbuy.create",
            community_id=community.id,
            organizer_id=organizer_id,
            status=GroupBuyStatus.PENDING,
            **attributes,
        )
        get_logger("groupbuy").info("Group buy created id=%s target=%s", group_buy.id, group_buy.target_quantity)
        return group_buy


def get_group_buy(group_buy_id, community: Optional[Community] = None) -> GroupBuy:
    group_buy = db.session.get(GroupBuy, group_buy_id) if group_buy_id is not None else None
    if group_buy is None or (community is not None and group_buy.community_id != community.id):
        raise NotFoundError("Group buy not found", title="Group Buy Not Found")
    return group_buy


def progress_percent(current: int, target: int) -> float:
    if not target:
        return 0.0
    return min(current / target * 100, 100.0)


def savings(price_individual, price_group) -> float:
    return round(float(price_individual) - float(price_group), 2)


def savings_percent(price_individual, price_group) -> int:
    individual = float(price_individual)
    if not individual:
        return 0
    return math.floor((individual - float(price_group)) / individual * 100 + 0.5)


def format_deadline(deadline: date, today: Optional[date] = None) -> str:
    days = (deadline - (today or _today())).days
    if days < 0:
        return "Expired"
    if days == 0:
        return "Today"
    if days == 1:
        return "1 day left"
    return f"{days} days left"


def is_active(group_buy: GroupBuy, today: Optional[date] = None) -> bool:
    return group_buy.deadline > (today or _today()) and group_buy.status != GroupBuyStatus.COMPLETED


def refresh_status(group_buy: GroupBuy, today: Optional[date] = None, commit: bool = True) -> GroupBuyStatus:
    """Move a pending buy to successful once the target is met, or to expired after its deadline."""
    if group_buy.status != GroupBuyStatus.PENDING:
        return group_buy.status
    if group_buy.current_quantity >= group_buy.target_quantity:
        new_status = GroupBuyStatus.SUCCESSFUL
    elif group_buy.deadline < (today or _today()):
        new_status = GroupBuyStatus.EXPIRED
    else:
        return group_buy.status
    get_logger("groupbuy").info("Group buy %s status %s -> %s", group_buy.id, group_buy.status.value, new_status.value)
    update_instance(group_buy, commit=commit, event_name="groupbuy.status", status=new_status)
    return new_status


def reopen_below_target(group_buy: GroupBuy, today: Optional[date] = None) -> GroupBuyStatus:
    """A successful buy that drops under its target takes participants again until the deadline."""
    if group_buy.status == GroupBuyStatus.SUCCESSFUL and group_buy.current_quantity < group_buy.target_quantity:
        get_logger("groupbuy").info("Group buy %s back under target %s/%s", group_buy.id,
                                    group_buy.current_quantity, group_buy.target_quantity)
        update_instance(group_buy, event_name="groupbuy.status", status=GroupBuyStatus.PENDING)
    return refresh_status(group_buy, today=today)


def join_group_buy(group_buy: GroupBuy, user_id, quantity: int = 1) -> GroupBuyParticipant:
    if group_buy.organizer_id == user_id:
        raise PermissionDenied("Organizers are already part of their own group buy", title="Cannot Join")
    refresh_status(group_buy)
    if group_buy.status != GroupBuyStatus.PENDING:
        raise ValidationFailed("This group buy is no longer accepting participants", title="Group Buy Closed")
    if quantity is None or quantity < 1:
        raise ValidationFailed("Quantity must be at least 1")

    with log_context(module="group_buy_utils", action="join", group_buy=str(group_buy.id), actor_id=str(user_id)):
        participant = create_instance(
            GroupBuyParticipant,
            actor_id=user_id,
            event_name="groupbuy.join",
            conflict_message="You're already part of this group buy",
            conflict_title="Already Joined",
            group_buy_id=group_buy.id,
            user_id=user_id,
            quantity_requested=quantity,
        )
        db.session.refresh(group_buy)
        refresh_status(group_buy)
        get_logger("groupbuy").info("Joined group buy current=%s target=%s",
                                    group_buy.current_quantity, group_buy.target_quantity)
        return participant


def leave_group_buy(group_buy: GroupBuy, user_id) -> bool:
    participant = GroupBuyParticipant.query.filter_by(group_buy_id=group_buy.id, user_id=user_id).first()
    with log_context(module="group_buy_utils", action="leave", group_buy=str(group_buy.id), actor_id=str(user_id)):
        removed = delete_instance(participant, actor_id=user_id, event_name="groupbuy.leave")
        if removed:
            db.session.refresh(group_buy)
            reopen_below_target(group_buy)
        return removed


def complete_group_buy(group_buy: GroupBuy, user_id) -> GroupBuy:
    if group_buy.organizer_id != user_id:
        raise PermissionDenied("Only the organizer can complete this group buy")
    return update_instance(group_buy, actor_id=user_id, event_name="groupbuy.complete",
                           status=GroupBuyStatus.COMPLETED)


def add_group_buy_comment(group_buy: GroupBuy, user_id, text: str) -> GroupBuyComment:
    text = (text or "").strip()
    if not text:
        raise ValidationFailed("Comment cannot be empty")
    return create_instance(
        GroupBuyComment,
        actor_id=user_id,
        event_name="groupbuy.comment",
        group_buy_id=group_buy.id,
        user_id=user_id,
        comment=text,
    )


def list_group_buys(community: Community, overview: bool = False) -> List[GroupBuy]:
    query = GroupBuy.query.filter(GroupBuy.community_id == community.id)
    if overview:
        query = query.filter(GroupBuy.status.in_(OVERVIEW_STATUSES))
    return query.order_by(GroupBuy.created_at.desc()).all()


def partition_group_buys(group_buys: Iterable[GroupBuy], today: Optional[date] = None) -> Tuple[List[GroupBuy], List[GroupBuy]]:
    active, past = [], []
    for group_buy in group_buys:
        (active if is_active(group_buy, today) else past).append(group_buy)
    return active, past


def participation_status(group_buys: Iterable[GroupBuy], user_id) -> Dict[str, Dict[str, bool]]:
    group_buys = list(group_buys)
    joined = set()
    if user_id is not None and group_buys:
        rows = (
            db.session.query(GroupBuyParticipant.group_buy_id)
            .filter(
                GroupBuyParticipant.user_id == user_id,
                GroupBuyParticipant.group_buy_id.in_([g.id for g in group_buys]),
            )
            .all()
        )
        joined = {group_buy_id for (group_buy_id,) in rows}
    return {
        str(g.id): {
            "is_participant": g.id in joined,
            "is_organizer": user_id is not None and g.organizer_id == user_id,
        }
        for g in group_buys
    }


def organizer_name(group_buy: GroupBuy) -> str:
    organizer = group_buy.organizer
    if organizer is None:
        return "Anonymous Organizer"
    return organizer.display_name or "Anonymous Organizer"
