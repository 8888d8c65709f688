# alumni/schemas/comment.py
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from alumni.schemas.common import UserSummary


class CommentCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)
    parent_comment_id: Optional[int] = None


class CommentUpdate(BaseModel):
    content: str = Field(..., min_length=1, max_length=1000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    post_id: int
    author_id: int
    parent_comment_id: Optional[int]
    content: str
    status: str
    is_edited: bool
    like_count: int
    reply_count: int
    created_at: datetime
    edited_at: Optional[datetime] = None

    author: Optional[UserSummary] = None


class CommentWithReplies(CommentResponse):
    # populated by the service with approved replies only
    replies: List[CommentResponse] = Field(default=[], validation_alias="visible_replies")


class CommentLikeResponse(BaseModel):
    comment_id: int
    liked: bool
    like_count: int
