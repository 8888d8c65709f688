# alumni/schemas/report.py
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

ReportReason = Literal[
    "spam",
    "harassment",
    "inappropriate_content",
    "hate_speech",
    "violence",
    "misinformation",
    "copyright_violation",
    "other",
]


class ReportCreate(BaseModel):
    entity_type: Literal["post", "comment"]
    entity_id: int
    reason: ReportReason
    description: Optional[str] = Field(None, max_length=500)


class ReportStatusUpdate(BaseModel):
    status: Literal["reviewed", "resolved", "dismissed"]
    resolution: Optional[str] = Field(None, max_length=1000)


class ReportResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reporter_id: int
    community_id: Optional[int]
    entity_type: str
    entity_id: int
    reason: str
    description: Optional[str]
    status: str
    reviewed_by: Optional[int]
    reviewed_at: Optional[datetime]
    resolution: Optional[str]
    created_at: datetime
