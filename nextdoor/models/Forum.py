import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, Enum as SqlEnum
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import relationship

from nextdoor.models.enumerations import PostTag, VoteType, enum_values

from ..extensions import db


class Post(db.Model):
    __tablename__ = "posts"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    community_id = Column(UUID(as_uuid=True), ForeignKey("communities.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    # Snapshot of the author's display name when the post was written
    author = Column(String(60), nullable=False)
    title = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    tag = Column(SqlEnum(PostTag, name="post_tag", values_callable=enum_values),
                 nullable=False, default=PostTag.GENERAL)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    community = relationship("Community", back_populates="posts")
    comments = relationship("Comment", back_populates="post", cascade="all, delete-orphan",
                            order_by="Comment.created_at")
    votes = relationship("PostVote", cascade="all, delete-orphan")

    @property
    def community_slug(self):
        return self.community.slug if self.community else None


class Comment(db.Model):
    __tablename__ = "comments"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    author = Column(String(60), nullable=False)
    body = Column(Text, nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))

    post = relationship("Post", back_populates="comments")
    votes = relationship("CommentVote", cascade="all, delete-orphan")


class PostVote(db.Model):
    __tablename__ = "post_votes"
    __table_args__ = (
        UniqueConstraint("post_id", "user_id", name="uq_post_vote_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    post_id = Column(UUID(as_uuid=True), ForeignKey("posts.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vote_type = Column(SqlEnum(VoteType, name="vote_type", values_callable=enum_values), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))


class CommentVote(db.Model):
    __tablename__ = "comment_votes"
    __table_args__ = (
        UniqueConstraint("comment_id", "user_id", name="uq_comment_vote_user"),
    )

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    comment_id = Column(UUID(as_uuid=True), ForeignKey("comments.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    vote_type = Column(SqlEnum(VoteType, name="comment_vote_type", values_callable=enum_values), nullable=False)
    created_at = Column(DateTime, default=lambda: datetime.now(timezone.utc))
