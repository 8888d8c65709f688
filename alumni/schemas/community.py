# alumni/schemas/community.py
from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

CommunityType = Literal["open", "closed", "hidden"]

# ==================== Community Schemas ====================


class CommunitySettings(BaseModel):
    allow_member_posts: bool = True
    require_post_approval: bool = False
    allow_media_uploads: bool = True
    allow_comments: bool = True
    allow_polls: bool = True


class CommunitySettingsUpdate(BaseModel):
    allow_member_posts: Optional[bool] = None
    require_post_approval: Optional[bool] = None
    allow_media_uploads: Optional[bool] = None
    allow_comments: Optional[bool] = None
    allow_polls: Optional[bool] = None


class CommunityBase(BaseModel):
    name: str = Field(..., min_length=2, max_length=100)
    description: str = Field(..., min_length=10, max_length=500)
    type: CommunityType = "open"
    cover_image: Optional[str] = None
    category_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list, max_length=20)
    rules: List[str] = Field(default_factory=list, max_length=20)


class CommunityCreate(CommunityBase):
    settings: CommunitySettings = Field(default_factory=CommunitySettings)


class CommunityUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    description: Optional[str] = Field(None, min_length=10, max_length=500)
    type: Optional[CommunityType] = None
    cover_image: Optional[str] = None
    category_id: Optional[int] = None
    tags: Optional[List[str]] = Field(None, max_length=20)
    rules: Optional[List[str]] = Field(None, max_length=20)
    settings: Optional[CommunitySettingsUpdate] = None


class CommunityResponse(CommunityBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    tenant_id: Optional[int]
    created_by: int
    status: str
    settings: CommunitySettings
    member_count: int
    post_count: int
    moderator_ids: List[int] = []
    created_at: datetime
    updated_at: datetime

    # Viewer's membership info
    membership_status: Optional[str] = None
    membership_role: Optional[str] = None
