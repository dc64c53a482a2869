from .User import User, UserProfile
from .Token import Token
from .Community import PostalSector, Community, CommunityMember
from .Forum import Post, Comment, PostVote, CommentVote
from .GroupBuy import GroupBuy, GroupBuyParticipant, GroupBuyComment

__all__ = [
    "User",
    "UserProfile",
    "Token",
    "PostalSector",
    "Community",
    "CommunityMember",
    "Post",
    "Comment",
    "PostVote",
    "CommentVote",
    "GroupBuy",
    "GroupBuyParticipant",
    "GroupBuyComment",
]
