# alumni/schemas/post.py
from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from alumni.schemas.common import UserSummary

PostType = Literal["text", "image", "video", "poll", "announcement"]
PostPriority = Literal["low", "medium", "high"]

# ==================== Post Schemas ====================


class PostBase(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    content: str = Field(..., min_length=1, max_length=2000)
    type: PostType = "text"
    priority: PostPriority = "medium"
    category: Optional[str] = Field(None, max_length=100)
    media_urls: List[str] = Field(default_factory=list, max_length=10)
    tags: List[str] = Field(default_factory=list, max_length=10)
    is_announcement: bool = False


class PostCreate(PostBase):
    poll_options: List[str] = Field(default_factory=list)
    poll_end_date: Optional[datetime] = None

    @field_validator("title", "content")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be blank")
        return v

    @field_validator("tags")
    @classmethod
    def normalize_tags(cls, v: List[str]) -> List[str]:
        return [tag.strip().lower() for tag in v if tag.strip()]

    @field_validator("poll_end_date")
    @classmethod
    def poll_end_in_future(cls, v):
        if v is None:
            return v
        if v.tzinfo is None:
            v = v.replace(tzinfo=timezone.utc)
        if v <= datetime.now(timezone.utc):
            raise ValueError("Poll end date must be in the future")
        return v

    @model_validator(mode="after")
    def check_poll(self):
        if self.type == "poll":
            options = [o.strip() for o in self.poll_options if o.strip()]
            if not 2 <= len(options) <= 10:
                raise ValueError("Poll must have between 2 and 10 options")
            self.poll_options = options
        elif self.poll_options:
            raise ValueError("Only poll posts can have poll options")
        return self


class PostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=100)
    content: Optional[str] = Field(None, min_length=1, max_length=2000)
    priority: Optional[PostPriority] = None
    category: Optional[str] = Field(None, max_length=100)
    media_urls: Optional[List[str]] = Field(None, max_length=10)
    tags: Optional[List[str]] = Field(None, max_length=10)
    is_announcement: Optional[bool] = None


class PollOptionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    position: int
    text: str
    vote_count: int


class PostResponse(PostBase):
    model_config = ConfigDict(from_attributes=True)

    id: int
    community_id: int
    author_id: int
    status: str
    is_pinned: bool
    view_count: int
    like_count: int
    comment_count: int
    poll_options: List[PollOptionResponse] = []
    poll_end_date: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime

    author: Optional[UserSummary] = None

    # Viewer-specific
    liked_by_me: bool = False
    my_vote: Optional[int] = None


class PollVoteRequest(BaseModel):
    option_index: int = Field(..., ge=0)


class PollResultResponse(BaseModel):
    post_id: int
    options: List[PollOptionResponse]
    total_votes: int
    my_vote: Optional[int] = None


class LikeStatusResponse(BaseModel):
    post_id: int
    liked: bool
    like_count: int


class TrendingPostResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    author_id: int
    like_count: int
    comment_count: int
    view_count: int
    created_at: datetime


class TagCount(BaseModel):
    name: str
    count: int
