# alumni/models/community_membership.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import validates
from sqlalchemy.sql import func

from alumni.core.database import Base
from alumni.core.permissions import derive_permissions

MEMBERSHIP_ROLES = ("member", "moderator", "admin")
MEMBERSHIP_STATUSES = ("pending", "approved", "rejected", "suspended", "left")


class CommunityMembership(Base):
    __tablename__ = "community_memberships"

    id = Column(Integer, primary_key=True, index=True)

    # Foreign Keys
    community_id = Column(
        Integer, ForeignKey("communities.id"), nullable=False, index=True
    )
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # Role and lifecycle
    role = Column(String(20), default="member", nullable=False)
    status = Column(String(20), default="pending", nullable=False, index=True)

    # Actors
    invited_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    approved_by = Column(Integer, ForeignKey("users.id"), nullable=True)
    suspended_by = Column(Integer, ForeignKey("users.id"), nullable=True)

    # Suspension
    suspension_reason = Column(String(200), nullable=True)
    suspension_end_date = Column(DateTime(timezone=True), nullable=True)

    # Timestamps
    joined_at = Column(DateTime(timezone=True), nullable=True)  # set on first approval
    left_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # One membership row per user per community
    __table_args__ = (
        UniqueConstraint(
            "community_id", "user_id", name="unique_community_user_membership"
        ),
    )

    @validates("role")
    def validate_role(self, key, value):
        if value not in MEMBERSHIP_ROLES:
            raise ValueError(f"Invalid membership role: {value}")
        return value

    @property
    def permissions(self) -> dict:
        return derive_permissions(self.role)

    def __repr__(self):
        return (
            f"<CommunityMembership(community_id={self.community_id}, "
            f"user_id={self.user_id}, role='{self.role}', status='{self.status}')>"
        )
