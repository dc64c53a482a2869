"""Share text and messaging deep links for group buys."""

import math
from datetime import date, datetime
from urllib.parse import quote

# unreserved marks left unescaped in deep links
_URI_SAFE = "!~*'()"

CATEGORY_NAMES = {
    "groceries": "Groceries",
    "electronics": "Electronics",
    "household": "Household Items",
    "clothing": "Clothing & Fashion",
    "books": "Books & Media",
    "general": "General Items",
}


def category_display_name(category: str) -> str:
    return CATEGORY_NAMES.get(category, category)


def format_price(value) -> str:
    # 12.0 -> "12", 12.5 -> "12.5"
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return str(value)


def format_share_date(deadline) -> str:
    if isinstance(deadline, str):
        deadline = date.fromisoformat(deadline[:10])
    if isinstance(deadline, datetime):
        deadline = deadline.date()
    return f"{deadline.day}/{deadline.month}/{deadline.year}"


def group_buy_url(base_url: str, community_slug: str, group_buy_id) -> str:
    return f"{base_url.rstrip('/')}/community/{community_slug}/groupbuy/{group_buy_id}"


def generate_share_message(group_buy, url: str, with_hashtags: bool = False) -> str:
    individual = float(group_buy.price_individual)
    group = float(group_buy.price_group)
    savings = individual - group
    # half-up, so 12.5% is shown as 13%
    percent = math.floor(savings / individual * 100 + 0.5) if individual else 0

    message = (
        "🛒 *Group Buy Alert!*\n\n"
        f"📦 *{group_buy.title}*\n"
        f"{group_buy.description}\n\n"
        "💰 *Pricing:*\n"
        f"• Individual: S${format_price(individual)}\n"
        f"• Group Price: S${format_price(group)}\n"
        f"• *Save S${savings:.2f} ({percent}% off!)*\n\n"
        f"👥 *Target:* {group_buy.target_quantity} people\n"
        f"📍 *Pickup:* {group_buy.pickup_location}\n"
        f"⏰ *Deadline:* {format_share_date(group_buy.deadline)}\n\n"
        f"Join now: {url}"
    )
    if with_hashtags:
        tag = "".join(CATEGORY_NAMES.get(group_buy.category, "General").split())
        message += f"\n\n#GroupBuy #{tag}"
    return message


def telegram_link(message: str) -> str:
    return f"tg://msg?text={quote(message, safe=_URI_SAFE)}"


def whatsapp_link(message: str) -> str:
    return f"https://wa.me/?text={quote(message, safe=_URI_SAFE)}"
