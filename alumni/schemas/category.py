# alumni/schemas/category.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CategoryEntityType = Literal[
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
]

# ==================== Category Schemas ====================


class CategoryBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    order: int = 0
    is_active: bool = True


class CategoryCreate(CategoryBase):
    entity_type: CategoryEntityType


class CategoryUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=100)
    description: Optional[str] = Field(None, max_length=500)
    order: Optional[int] = None
    is_active: Optional[bool] = None


class CategoryResponse(CategoryBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: Optional[int]
    entity_type: str
    slug: str
    created_by: Optional[int]
    created_at: datetime
    updated_at: datetime
