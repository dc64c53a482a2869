"""Account creation and single-use email tokens (magic links, password resets)."""

from __future__ import annotations

from typing import Optional
from urllib.parse import urlencode

from flask import current_app
from sqlalchemy.exc import IntegrityError

from nextdoor.errors import ConflictError, ValidationFailed
from nextdoor.extensions import db
from nextdoor.models import Token, User
from nextdoor.models.enumerations import TokenType
from nextdoor.security_utils import audit_log
from nextdoor.utils.logging_utils import get_logger
from nextdoor.utils.services.mail import send_magic_link, send_password_reset

from .profile_utils import set_user_display_name, validate_display_name


def _base_url() -> str:
    return current_app.config.get("APP_BASE_URL", "").rstrip("/")


def magic_link_url(raw_token: str) -> str:
    return f"{_base_url()}/auth/callback?{urlencode({'code': raw_token})}"


def reset_password_url(raw_token: str) -> str:
    return f"{_base_url()}/reset-password?{urlencode({'token': raw_token})}"


def register_user(email: str, password: str, display_name: str) -> User:
    """Create a password account. The display name is checked before anything is written."""
    ok, error = validate_display_name(display_name)
    if not ok:
        raise ValidationFailed(error, title="Invalid Display Name")

    email = User.normalize_email(email)
    if not email or "@" not in email:
        raise ValidationFailed("Please enter a valid email address")
    if User.find_by_email(email):
        raise ConflictError("An account with this email already exists", title="Registration failed")

    user = User(email=email)
    try:
        user.set_password(password)
    except ValueError:
        raise ValidationFailed(
            f"Password must be at least {current_app.config.get('PASSWORD_MIN_LENGTH', 6)} characters",
            title="Weak Password",
        )

    db.session.add(user)
    try:
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        raise ConflictError("An account with this email already exists", title="Registration failed")
    set_user_display_name(user.id, display_name)

    _, raw = Token.issue(user, TokenType.MAGIC_LINK, current_app.config.get("MAGIC_LINK_TTL_MINUTES", 60))
    db.session.commit()
    send_magic_link(user.email, magic_link_url(raw))
    get_logger("auth").info("Registered user id=%s", user.id)
    audit_log("auth.register", user_id=user.id)
    return user


def request_magic_link(email: str) -> User:
    """Issue a sign-in link, creating a passwordless account for unknown addresses."""
    email = User.normalize_email(email)
    if not email or "@" not in email:
        raise ValidationFailed("Please enter a valid email address")

    user = User.find_by_email(email)
    if user is None:
        user = User(email=email)
        db.session.add(user)
        db.session.flush()
        get_logger("auth").info("Created passwordless account id=%s", user.id)

    _, raw = Token.issue(user, TokenType.MAGIC_LINK, current_app.config.get("MAGIC_LINK_TTL_MINUTES", 60))
    db.session.commit()
    send_magic_link(user.email, magic_link_url(raw))
    audit_log("auth.magic_link_sent", user_id=user.id)
    return user


def redeem_magic_link(code: str) -> Optional[User]:
    """Consume a sign-in code. Returns the user, or None when the code is unknown, used or expired."""
    row = Token.find_valid(code, TokenType.MAGIC_LINK)
    if row is None or row.user is None or not row.user.is_active:
        get_logger("auth").warning("Magic link rejected")
        return None
    row.consume()
    user = row.user
    user.email_confirmed = True
    user.reset_failed_logins()
    db.session.commit()
    audit_log("auth.magic_link_redeemed", user_id=user.id)
    return user


def request_password_reset(email: str) -> bool:
    """Mail a reset link when the account exists. Callers respond identically either way."""
    user = User.find_by_email(email)
    if user is None or not user.is_active:
        get_logger("auth").info("Password reset requested for unknown account")
        return False
    _, raw = Token.issue(user, TokenType.PASSWORD_RESET, current_app.config.get("RESET_TOKEN_TTL_MINUTES", 30))
    db.session.commit()
    send_password_reset(user.email, reset_password_url(raw))
    audit_log("auth.password_reset_requested", user_id=user.id)
    return True


def reset_password(email: str, raw_token: str, new_password: str) -> User:
    row = Token.find_valid(raw_token, TokenType.PASSWORD_RESET)
    if row is None or row.user is None or row.user.email != User.normalize_email(email):
        raise ValidationFailed("This reset link is invalid or has expired", title="Reset failed")
    user = row.user
    try:
        user.set_password(new_password)
    except ValueError:
        raise ValidationFailed(
            f"Password must be at least {current_app.config.get('PASSWORD_MIN_LENGTH', 6)} characters",
            title="Weak Password",
        )
    row.consume()
    user.reset_failed_logins()
    db.session.commit()
    audit_log("auth.password_reset", user_id=user.id)
    return user
