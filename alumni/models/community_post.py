# alumni/models/community_post.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.sql import func

from alumni.core.database import Base

POST_TYPES = ("text", "image", "video", "poll", "announcement")
POST_STATUSES = ("approved", "pending", "rejected", "deleted")
POST_PRIORITIES = ("low", "medium", "high")


class CommunityPost(Base):
    __tablename__ = "community_posts"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    community_id = Column(
        Integer, ForeignKey("communities.id"), nullable=False, index=True
    )
    author_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Content
    title = Column(String(100), nullable=False)
    content = Column(Text, nullable=False)
    type = Column(String(20), default="text", nullable=False)
    priority = Column(String(10), default="medium", nullable=False)
    category = Column(String(100), nullable=True)  # free-form label
    media_urls = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)

    # Poll
    poll_end_date = Column(DateTime(timezone=True), nullable=True)

    # Post Settings
    is_pinned = Column(Boolean, default=False, nullable=False)
    is_announcement = Column(Boolean, default=False, nullable=False)

    # Moderation Status: approved, pending, rejected, deleted
    status = Column(String(20), default="approved", nullable=False, index=True)

    # Statistics
    view_count = Column(Integer, default=0, nullable=False)

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

    @property
    def is_poll(self) -> bool:
        return self.type == "poll"

    def __repr__(self):
        return f"<CommunityPost(id={self.id}, community_id={self.community_id}, status='{self.status}')>"
