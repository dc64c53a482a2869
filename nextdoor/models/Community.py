import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from ..extensions import db


class PostalSector(db.Model):
    """Lookup row keyed by the first two digits of a Singapore postal code."""

    __tablename__ = "postal_sectors"

    id = Column(Integer, primary_key=True, autoincrement=True)
    sector_code = Column(String(2), nullable=False, unique=True)
    postal_district = Column(Integer, nullable=False)
    district_name = Column(String(120), nullable=False)
    region = Column(String(30), nullable=False, index=True)
    general_locations = Column(String(255))
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    def to_dict(self):
        return {
            "id": self.id,
            "sector_code": self.sector_code,
            "postal_district": self.postal_district,
            "district_name": self.district_name,
            "region": self.region,
            "general_locations": self.general_locations,
        }


class Community(db.Model):
    __tablename__ = "communities"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    slug = Column(String(160), nullable=False, unique=True, index=True)
    name = Column(String(160), nullable=False)
    area = Column(String(120))
    region = Column(String(30))
    sector_code = Column(String(2), ForeignKey("postal_sectors.sector_code"), nullable=True)
    description = Column(Text)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    sector = relationship("PostalSector")
    members = relationship("CommunityMember", back_populates="community",
                           cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="community", cascade="all, delete-orphan")
    group_buys = relationship("GroupBuy", back_populates="community", cascade="all, delete-orphan")

    def __str__(self):
        return f"<Community(slug='{self.slug}')>"


class CommunityMember(db.Model):
    __tablename__ = "community_members"
    __table_args__ = (
        UniqueConstraint("community_id", "user_id", name="uq_community_member"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    community_id = Column(UUID(as_uuid=True), ForeignKey("communities.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    joined_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    community = relationship("Community", back_populates="members")
    user = relationship("User", back_populates="memberships")
