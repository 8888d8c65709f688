# alumni/models/job_post.py
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.sql import func

from alumni.core.database import Base


class JobPost(Base):
    __tablename__ = "job_posts"

    id = Column(Integer, primary_key=True, index=True)
    tenant_id = Column(Integer, ForeignKey("tenants.id"), nullable=True, index=True)
    title = Column(String(200), nullable=False)

    # Category references
    job_type_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )  # entity_type='job_type'
    experience_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )  # entity_type='job_experience'
    industry_id = Column(
        Integer, ForeignKey("categories.id"), nullable=True, index=True
    )  # entity_type='job_industry'

    created_at = Column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    def __repr__(self):
        return f"<JobPost(id={self.id}, title='{self.title}')>"
