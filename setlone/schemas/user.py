"""
Pydantic schemas for the user endpoints.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class RegisterRequest(BaseModel):
    """Registration payload. Format checks beyond length live in the user service."""

    model_config = ConfigDict(populate_by_name=True)

    email: str = Field(max_length=255)
    username: str = Field(min_length=3, max_length=50)
    password: str = Field(min_length=6)
    real_name: str = Field(alias="realName", min_length=2, max_length=100)
    birth_date: str = Field(alias="birthDate", examples=["1990-01-31"])
    phone_number: str = Field(alias="phoneNumber", examples=["+82010-1234-5678"])


class UserResponse(BaseModel):
    """Public view of a user row."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    uid: Optional[str] = None
    email: str
    username: str
    profile_image: Optional[str] = None
    bio: Optional[str] = None
    real_name: Optional[str] = None
    birth_date: Optional[str] = None
    phone_number: Optional[str] = None
    is_active: bool
    is_verified: bool
    email_verified: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class UserEnvelope(BaseModel):
    success: bool = True
    data: UserResponse


class RegisteredUser(BaseModel):
    userId: int
    uid: str
    email: str
    username: str


class RegisterResponse(BaseModel):
    success: bool = True
    message: str
    data: RegisteredUser


class UIDUpdateRequest(BaseModel):
    uid: str = Field(description="7-digit unique user ID", examples=["0012345"])


class UIDPayload(BaseModel):
    uid: str


class UIDUpdateResponse(BaseModel):
    success: bool = True
    message: str
    data: UIDPayload


class ProfileUpdateRequest(BaseModel):
    profile_image: Optional[str] = Field(
        default=None, description="Image URL, /uploads/ path or data:image base64 string"
    )
    bio: Optional[str] = None


class ProfilePayload(BaseModel):
    profile_image: Optional[str] = None
    bio: Optional[str] = None


class ProfileUpdateResponse(BaseModel):
    success: bool = True
    message: str
    data: ProfilePayload


class EmailRequest(BaseModel):
    email: str = Field(max_length=255)


class VerifyEmailRequest(BaseModel):
    email: str = Field(max_length=255)
    code: str = Field(description="Verification code", examples=["123456"])
