# alumni/models/report.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.sql import func

from alumni.core.database import Base

REPORT_ENTITY_TYPES = ("post", "comment")
REPORT_REASONS = (
    "spam",
    "harassment",
    "inappropriate_content",
    "hate_speech",
    "violence",
    "misinformation",
    "copyright_violation",
    "other",
)
REPORT_STATUSES = ("pending", "reviewed", "resolved", "dismissed")


class Report(Base):
    __tablename__ = "reports"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    reporter_id = Column(
        Integer, ForeignKey("users.id"), nullable=False, index=True
    )  # User who reported
    community_id = Column(
        Integer, ForeignKey("communities.id"), nullable=True, index=True
    )  # Community the reported content lives in
    reviewed_by = Column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )  # Super admin who triaged

    # Reported content
    entity_type = Column(String(20), nullable=False)  # 'post', 'comment'
    entity_id = Column(Integer, nullable=False, index=True)

    # Report Details
    reason = Column(String(40), nullable=False)
    description = Column(String(500), nullable=True)
    status = Column(
        String(20), default="pending", nullable=False, index=True
    )  # pending, reviewed, resolved, dismissed
    resolution = Column(String(1000), nullable=True)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    reviewed_at = Column(DateTime(timezone=True), nullable=True)

    # One report per reporter per entity
    __table_args__ = (
        UniqueConstraint(
            "reporter_id", "entity_type", "entity_id", name="unique_reporter_entity"
        ),
    )

    def __repr__(self):
        return f"<Report(id={self.id}, {self.entity_type}={self.entity_id}, status='{self.status}')>"
