"""
Content Schemas

Pydantic models for content registration metadata and content responses.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from content_shield.constants.licensing import LicenseType


class ContentMetadata(BaseModel):
    """Metadata supplied alongside an upload"""

    title: str = Field(..., min_length=1, max_length=200)
    description: str | None = Field(None, max_length=5000)
    license_type: LicenseType
    allow_download: bool = False
    price: int | None = Field(None, gt=0, description="Price in minor currency units (paid content only)")
    original_filename: str = Field("", max_length=255)
    content_type: str = "application/octet-stream"


class ContentOwner(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    avatar_url: str | None = None


class ContentResponse(BaseModel):
    """Content item as returned by the API"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str | None = None
    license_type: str
    allow_download: bool
    price: int | None = None
    file_path: str
    thumbnail_path: str | None = None
    content_type: str
    content_hash: str
    owner_id: int
    like_count: int
    comment_count: int
    created_at: datetime
    updated_at: datetime
    owner: ContentOwner | None = None


class ContentWithAccess(ContentResponse):
    """Content item annotated with the viewer's access decision"""

    user_has_access: bool


class AccessDecisionResponse(BaseModel):
    content_id: int
    can_access: bool
    can_download: bool
