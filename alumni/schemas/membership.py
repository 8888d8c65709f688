# alumni/schemas/membership.py
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from alumni.schemas.common import UserSummary


class MembershipPermissions(BaseModel):
    can_post: bool
    can_comment: bool
    can_invite: bool
    can_moderate: bool


class MembershipResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    community_id: int
    user_id: int
    role: str
    status: str
    permissions: MembershipPermissions
    invited_by: Optional[int]
    approved_by: Optional[int]
    suspended_by: Optional[int]
    suspension_reason: Optional[str]
    suspension_end_date: Optional[datetime]
    joined_at: Optional[datetime]
    left_at: Optional[datetime]
    created_at: datetime

    user: Optional[UserSummary] = None


class InviteRequest(BaseModel):
    user_id: int


class SuspendRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=200)
    end_date: Optional[datetime] = None

    @field_validator("end_date")
    @classmethod
    def end_date_in_future(cls, v):
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Suspension end date must be in the future")
        return v

