# models/User.py

import uuid
import bcrypt
import logging
from datetime import datetime, timedelta, timezone
from sqlalchemy import Column, String, Boolean, DateTime, Integer, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from nextdoor.security_utils import password_strong

from ..extensions import db

logger = logging.getLogger("nextdoor.auth")

# --- Constants ---
MAX_FAILED_ATTEMPTS = 5
LOCK_DURATION_MINUTES = 15


def as_utc(dt):
    """SQLite hands back naive datetimes; treat them as UTC."""
    if dt is not None and dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


class UserProfile(db.Model):
    __tablename__ = "user_profiles"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, unique=True)
    display_name = Column(String(30), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(
        timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    user = relationship("User", back_populates="profile")


# --- User Model ---

class User(db.Model):
    __tablename__ = 'users'

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String(254), unique=True, nullable=False)
    # Accounts created through a magic link have no password until they set one
    password_hash = Column(String(255), nullable=True)

    is_active = Column(Boolean, default=True)
    email_confirmed = Column(Boolean, default=False)

    failed_login_attempts = Column(Integer, default=0)
    lock_until = Column(DateTime)
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(
        timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    # --- Relationships ---
    profile = relationship("UserProfile", back_populates="user", uselist=False,
                           cascade="all, delete-orphan")
    memberships = relationship("CommunityMember", back_populates="user",
                               cascade="all, delete-orphan")

    # --- Security Methods ---

    def is_locked(self) -> bool:
        return bool(self.lock_until) and datetime.now(timezone.utc) < as_utc(self.lock_until)

    def lock_account(self):
        self.lock_until = datetime.now(timezone.utc) + timedelta(minutes=LOCK_DURATION_MINUTES)
        logger.warning("User %s locked until %s", self.id, self.lock_until)

    def increment_failed_logins(self):
        if self.is_locked():
            return
        if self.lock_until:
            # lock served; start a fresh count
            self.reset_failed_logins()
        self.failed_login_attempts = (self.failed_login_attempts or 0) + 1
        if self.failed_login_attempts >= MAX_FAILED_ATTEMPTS:
            self.lock_account()

    def reset_failed_logins(self):
        self.failed_login_attempts = 0
        self.lock_until = None

    def set_password(self, raw_password: str):
        if not password_strong(raw_password):
            raise ValueError("Password does not meet complexity requirements")
        self.password_hash = bcrypt.hashpw(raw_password.encode(), bcrypt.gensalt()).decode()

    def check_password(self, raw_password: str) -> bool:
        if not self.password_hash or not raw_password:
            return False
        try:
            return bcrypt.checkpw(raw_password.encode(), self.password_hash.encode())
        except ValueError:
            return False

    @property
    def display_name(self):
        return self.profile.display_name if self.profile else None

    # --- Authentication (Static) ---

    @staticmethod
    def normalize_email(email):
        return (email or "").strip().lower()

    @staticmethod
    def find_by_email(email):
        return User.query.filter_by(email=User.normalize_email(email)).first()

    @staticmethod
    def authenticate(email: str, password: str):
        user = User.query.filter(
            User.email == User.normalize_email(email),
            User.is_active == True,
        ).first()

        if not user or user.is_locked() or not user.check_password(password):
            if user:
                user.increment_failed_logins()
                db.session.commit()
            return None

        user.last_login = datetime.now(timezone.utc)
        user.reset_failed_logins()
        db.session.commit()
        return user

    def __str__(self):
        return f"<User(email='{self.email}')>"
