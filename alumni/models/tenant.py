# alumni/models/tenant.py
from sqlalchemy import Boolean, Column, DateTime, Integer, String
from sqlalchemy.sql import func

from alumni.core.database import Base


class Tenant(Base):
    __tablename__ = "tenants"

    id = Column(Integer, primary_key=True, index=True)

    # Basic Info
    name = Column(String(150), nullable=False, unique=True)
    domain = Column(String(150), nullable=True, unique=True)  # e.g. alumni.college.edu
    is_active = Column(Boolean, default=True, nullable=False)

    # Timestamps
    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<Tenant(id={self.id}, name='{self.name}')>"
