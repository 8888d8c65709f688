# alumni/models/event.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from alumni.core.database import Base


class Event(Base):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
    title = Column(String(200), nullable=False)

    # Category references (entity_type='event_type')
    event_type_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Event(id={self.id}, title='{self.title}')>"
