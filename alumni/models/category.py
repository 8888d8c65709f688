# alumni/models/category.py
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.sql import func

from alumni.core.database import Base

CATEGORY_ENTITY_TYPES = (
    "community",
    "community_post_category",
    "department",
    "program",
    "event_type",
    "event_location",
    "event_price_range",
    "mentorship_category",
    "donation_category",
    "gallery_category",
    "job_type",
    "job_experience",
    "job_industry",
)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
    created_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Basic Info
    name = Column(String(100), nullable=False)
    slug = Column(String(120), nullable=False, index=True)
    description = Column(String(500), nullable=True)
    entity_type = Column(String(40), nullable=False, index=True)

    # Display
    is_active = Column(Boolean, default=True, nullable=False)
    order = Column(Integer, default=0, nullable=False)

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
        UniqueConstraint(
            "tenant_id", "entity_type", "slug", name="unique_tenant_category_slug"
        ),
    )

    def __repr__(self):
        return f"<Category(id={self.id}, entity_type='{self.entity_type}', slug='{self.slug}')>"
