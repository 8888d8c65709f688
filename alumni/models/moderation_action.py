# alumni/models/moderation_action.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from alumni.core.database import Base


class ModerationAction(Base):
    """Append-only log of moderation decisions. Rows are never updated."""

    __tablename__ = "moderation_actions"

    id = Column(Integer, primary_key=True, index=True)

    community_id = Column(
        Integer, ForeignKey("communities.id"), nullable=True, index=True
    )
    actor_id = Column(
        Integer, ForeignKey("users.id"), nullable=True, index=True
    )  # NULL for scheduler-driven actions

    # What was acted on
    entity_type = Column(String(20), nullable=False)  # membership, post, comment, report
    entity_id = Column(Integer, nullable=False, index=True)
    action = Column(String(30), nullable=False)  # approve, reject, suspend, pin, ...
    reason = Column(String(1000), nullable=True)

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<ModerationAction({self.entity_type}={self.entity_id}, action='{self.action}')>"
