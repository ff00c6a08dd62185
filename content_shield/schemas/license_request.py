from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict


class LicenseRequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    content_id: int
    requester_id: int
    owner_id: int
    status: str
    created_at: datetime
    updated_at: datetime | None = None


class ReceivedLicenseRequest(BaseModel):
    """A request on one of the viewer's own content items"""

    id: int
    content_id: int
    content_title: str
    requester_id: int
    requester_email: str
    requester_avatar_url: str | None = None
    status: str
    created_at: datetime
    updated_at: datetime | None = None


class SentLicenseRequest(BaseModel):
    """A request the viewer made on someone else's content"""

    id: int
    content_id: int
    content_title: str
    owner_id: int
    owner_email: str
    status: str
    created_at: datetime
    updated_at: datetime | None = None


class RequestStatusUpdate(BaseModel):
    """Owner/admin decision on a pending request"""

    status: Literal["approved", "rejected"]
