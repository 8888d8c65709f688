# alumni/models/community.py
from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from alumni.core.database import Base

COMMUNITY_TYPES = ("open", "closed", "hidden")
COMMUNITY_SETTINGS = (
    "allow_member_posts",
    "require_post_approval",
    "allow_media_uploads",
    "allow_comments",
    "allow_polls",
)


class Community(Base):
    __tablename__ = "communities"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    category_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )  # entity_type='community'

    # Basic Info
    name = Column(String(100), nullable=False, index=True)
    description = Column(Text, nullable=False)
    cover_image = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    rules = Column(JSON, nullable=False, default=list)

    # Privacy: 'open' (join directly), 'closed' (request), 'hidden' (members only)
    type = Column(String(20), default="open", nullable=False, index=True)
    status = Column(
        String(20), default="active", nullable=False, index=True
    )  # 'active', 'archived'

    # Community Settings
    allow_member_posts = Column(Boolean, default=True, nullable=False)
    require_post_approval = Column(Boolean, default=False, nullable=False)
    allow_media_uploads = Column(Boolean, default=True, nullable=False)
    allow_comments = Column(Boolean, default=True, nullable=False)
    allow_polls = Column(Boolean, default=True, nullable=False)

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

    __table_args__ = (
        UniqueConstraint("tenant_id", "name", name="unique_tenant_community_name"),
    )

    @property
    def settings(self) -> dict:
        return {key: getattr(self, key) for key in COMMUNITY_SETTINGS}

    @property
    def is_archived(self) -> bool:
        return self.status == "archived"

    @property
    def moderator_ids(self) -> list:
        return [membership.user_id for membership in self.moderator_memberships]

    def __repr__(self):
        return f"<Community(id={self.id}, name='{self.name}', type='{self.type}')>"
