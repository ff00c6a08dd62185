from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CommentCreate(BaseModel):
    body: str = Field(..., min_length=1, max_length=10000)


class CommentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content_id: int
    user_id: int
    body: str
    created_at: datetime


class LikeResponse(BaseModel):
    content_id: int
    liked: bool
    like_count: int
