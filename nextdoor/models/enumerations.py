from enum import Enum
# enums.py


class TokenType(str, Enum):
    BLOCK = 'block'
    MAGIC_LINK = 'magic_link'
    PASSWORD_RESET = 'password_reset'


class VoteType(str, Enum):
    UP = 'up'
    DOWN = 'down'


class VoteTarget(str, Enum):
    POST = 'post'
    COMMENT = 'comment'


class PostTag(str, Enum):
    GENERAL = 'General'
    ANNOUNCEMENT = 'Announcement'
    BUY_SELL = 'Buy/Sell'
    QUESTION = 'Question'
    NOTICE = 'Notice'
    LOST_FOUND = 'Lost & Found'
    FOOD = 'Food'


class GroupBuyStatus(str, Enum):
    PENDING = 'pending'
    SUCCESSFUL = 'successful'
    COMPLETED = 'completed'
    EXPIRED = 'expired'


class GroupBuyCategory(str, Enum):
    GROCERIES = 'groceries'
    ELECTRONICS = 'electronics'
    HOUSEHOLD = 'household'
    CLOTHING = 'clothing'
    BOOKS = 'books'
    GENERAL = 'general'


class PropertyType(str, Enum):
    HDB = 'HDB'
    CONDO = 'Condo'
    LANDED = 'Landed'


class ZoningType(str, Enum):
    RESIDENTIAL = 'Residential'
    INDUSTRIAL = 'Industrial'


def enum_values(enum_cls):
    """Persist enum values rather than member names."""
    return [member.value for member in enum_cls]
