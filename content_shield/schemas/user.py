from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field


class UserCreate(BaseModel):
    email: EmailStr = Field(..., description="A valid email address.")
    password: str = Field(..., min_length=6, max_length=128, description="Password must be at least 6 characters.")


class UserLogin(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    email: str
    avatar_url: str | None = None
    role: str
    created_at: datetime


class UserProfile(UserResponse):
    post_count: int = 0
    license_count: int = 0


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserResponse
