# alumni/schemas/common.py
from datetime import datetime
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class ApiResponse(BaseModel, Generic[T]):
    """Envelope every domain endpoint answers with."""

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    error: Optional[str] = None


class Page(BaseModel, Generic[T]):
    items: List[T]
    total: int
    page: int
    size: int
    total_pages: int


class UserSummary(BaseModel):
    """Minimal user info embedded in community payloads"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    full_name: str
    profile_picture: Optional[str] = None


class ModerationActionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    community_id: Optional[int]
    actor_id: Optional[int]
    entity_type: str
    entity_id: int
    action: str
    reason: Optional[str]
    created_at: datetime


class ModerationReason(BaseModel):
    reason: Optional[str] = Field(None, max_length=1000)
