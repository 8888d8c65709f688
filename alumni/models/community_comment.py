# alumni/models/community_comment.py
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.sql import func

from alumni.core.database import Base

COMMENT_STATUSES = ("approved", "pending", "rejected", "deleted")


class CommunityComment(Base):
    __tablename__ = "community_comments"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    post_id = Column(
        Integer, ForeignKey("community_posts.id"), nullable=False, index=True
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    parent_comment_id = Column(
        Integer, ForeignKey("community_comments.id"), nullable=True, index=True
    )  # one level of replies

    # Content
    content = Column(Text, nullable=False)
    is_edited = Column(Boolean, default=False, nullable=False)
    status = Column(String(20), default="approved", nullable=False, index=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
    edited_at = Column(DateTime(timezone=True), nullable=True)

    def __repr__(self):
        return f"<CommunityComment(id={self.id}, post_id={self.post_id}, author_id={self.author_id})>"
