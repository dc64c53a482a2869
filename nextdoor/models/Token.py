import hashlib
import secrets
from datetime import datetime, timedelta, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Enum as SqlEnum
from sqlalchemy.dialects.postgresql import UUID

from nextdoor.models.enumerations import TokenType, enum_values
from nextdoor.models.User import as_utc

from ..extensions import db


def hash_token(raw: str) -> str:
    return hashlib.sha256(raw.encode()).hexdigest()


class Token(db.Model):
    """One-time credentials (magic links, password resets) and revoked JWT ids.

    Only the sha256 of an emailed secret is stored. ``block`` rows carry the
    ``jti`` of a logged-out JWT until it would have expired anyway.
    """

    __tablename__ = "auth_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=True)
    token_type = Column(SqlEnum(TokenType, name="token_type", values_callable=enum_values), nullable=False)
    token_hash = Column(String(64), index=True)
    jti = Column(String(64), index=True)
    expires_at = Column(DateTime, nullable=False)
    consumed_at = Column(DateTime)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    user = db.relationship("User")

    @classmethod
    def issue(cls, user, token_type: TokenType, ttl_minutes: int):
        """Create a token row for ``user``; returns ``(row, plaintext)``."""
        raw = secrets.token_urlsafe(32)
        row = cls(
            user_id=user.id,
            token_type=token_type,
            token_hash=hash_token(raw),
            expires_at=datetime.now(timezone.utc) + timedelta(minutes=ttl_minutes),
        )
        db.session.add(row)
        return row, raw

    @classmethod
    def find_valid(cls, raw: str, token_type: TokenType):
        if not raw:
            return None
        row = cls.query.filter_by(token_hash=hash_token(raw), token_type=token_type).first()
        if row is None or row.consumed_at is not None:
            return None
        if as_utc(row.expires_at) <= datetime.now(timezone.utc):
            return None
        return row

    def consume(self):
        self.consumed_at = datetime.now(timezone.utc)

    @classmethod
    def block_jti(cls, jti: str, user_id, expires_at: datetime):
        row = cls(user_id=user_id, token_type=TokenType.BLOCK, jti=jti, expires_at=expires_at)
        db.session.add(row)
        return row
