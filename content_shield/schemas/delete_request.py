from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class DeleteRequestCreate(BaseModel):
    reason: str | None = Field(None, max_length=2000)


class DeleteRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content_id: int
    user_id: int
    reason: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime | None = None


class DeleteRequestDetail(DeleteRequestResponse):
    """Admin listing row with the content and people involved"""

    content_title: str
    content_owner_email: str
    user_email: str
