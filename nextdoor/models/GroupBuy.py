import uuid
from datetime import datetime, timezone

from sqlalchemy import (
    Column, Date, DateTime, ForeignKey, Integer, Numeric, String, Text, UniqueConstraint, Enum as SqlEnum
)
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from nextdoor.models.enumerations import GroupBuyStatus, enum_values

from ..extensions import db


class GroupBuy(db.Model):
    __tablename__ = "group_buys"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    community_id = Column(UUID(as_uuid=True), ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    organizer_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    title = Column(String(200), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(30), nullable=False, default="general")
    target_quantity = Column(Integer, nullable=False)
    price_individual = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    price_group = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    deadline = Column(Date, nullable=False)
    pickup_location = Column(String(255), nullable=False)
    status = Column(SqlEnum(GroupBuyStatus, name="group_buy_status", values_callable=enum_values),
                    nullable=False, default=GroupBuyStatus.PENDING)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(DateTime, default=lambda: datetime.now(
        timezone.utc), onupdate=lambda: datetime.now(timezone.utc))

    community = relationship("Community", back_populates="group_buys")
    organizer = relationship("User")
    participants = relationship("GroupBuyParticipant", back_populates="group_buy",
                                cascade="all, delete-orphan", order_by="GroupBuyParticipant.joined_at")
    comments = relationship("GroupBuyComment", back_populates="group_buy",
                            cascade="all, delete-orphan", order_by="GroupBuyComment.created_at")

    @property
    def community_slug(self):
        return self.community.slug if self.community else None

    @property
    def current_quantity(self):
        return sum(p.quantity_requested or 0 for p in self.participants)


class GroupBuyParticipant(db.Model):
    __tablename__ = "group_buy_participants"
    __table_args__ = (
        UniqueConstraint("group_buy_id", "user_id", name="uq_group_buy_participant"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_buy_id = Column(UUID(as_uuid=True), ForeignKey("group_buys.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    quantity_requested = Column(Integer, nullable=False, default=1)
    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    group_buy = relationship("GroupBuy", back_populates="participants")
    user = relationship("User")


class GroupBuyComment(db.Model):
    __tablename__ = "group_buy_comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    group_buy_id = Column(UUID(as_uuid=True), ForeignKey("group_buys.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    comment = Column(Text, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    group_buy = relationship("GroupBuy", back_populates="comments")
    user = relationship("User")
