# schemas/__init__.py

from .user_schema import UserSchema, UserProfileSchema
from .login_schema import LoginSchema, RegisterSchema, EmailSchema, ResetPasswordSchema
from .community_schema import CommunitySchema, PostalSectorSchema
from .post_schema import PostSchema, CommentSchema
from .group_buy_schema import (
    GroupBuySchema,
    GroupBuyDetailSchema,
    GroupBuyCommentSchema,
    GroupBuyParticipantSchema,
)

__all__ = [
    'UserSchema',
    'UserProfileSchema',
    'LoginSchema',
    'RegisterSchema',
    'EmailSchema',
    'ResetPasswordSchema',
    'CommunitySchema',
    'PostalSectorSchema',
    'PostSchema',
    'CommentSchema',
    'GroupBuySchema',
    'GroupBuyDetailSchema',
    'GroupBuyCommentSchema',
    'GroupBuyParticipantSchema',
]
