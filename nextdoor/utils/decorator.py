from functools import wraps

from flask import g
from flask_jwt_extended import get_jwt_identity, verify_jwt_in_request

from nextdoor.errors import AuthRequired
from nextdoor.extensions import db
from nextdoor.models import User
from nextdoor.security_utils import coerce_uuid
from nextdoor.utils.model_utils.community_utils import get_community_by_slug


def current_user_id(optional: bool = True):
    """UUID of the caller, or None for anonymous requests when ``optional``."""
    verify_jwt_in_request(optional=optional)
    return coerce_uuid(get_jwt_identity())


def current_user(optional: bool = True):
    uid = current_user_id(optional=optional)
    if uid is None:
        return None
    user = db.session.get(User, uid)
    if user is None or not user.is_active:
        return None
    return user


def require_user(message="Please log in to continue", title="Login Required"):
    """Load the signed-in user into ``g.user``; 401 with a friendly message otherwise."""

    def decorator(fn):
        @wraps(fn)
        def wrapper(*args, **kwargs):
            user = current_user(optional=True)
            if user is None:
                raise AuthRequired(message, title=title)
            g.user = user
            return fn(*args, **kwargs)

        return wrapper

    return decorator


def load_community(fn):
    """Resolve the ``slug`` URL argument to ``community`` (404 when unknown)."""

    @wraps(fn)
    def wrapper(*args, **kwargs):
        kwargs["community"] = get_community_by_slug(kwargs.pop("slug"))
        return fn(*args, **kwargs)

    return wrapper
