from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\+?[\d\s\-\(\)]+$"


class ContactBase(BaseModel):
    """Shared fields for contact schemas."""

    name: str = Field(min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=20, pattern=PHONE_PATTERN)
    address: Optional[str] = Field(None, max_length=500)
    company: Optional[str] = Field(None, max_length=100)
    position: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = None
    photo: Optional[str] = Field(None, max_length=500)

    @field_validator("name")
    @classmethod
    def strip_name(cls, value):
        if value is None:
            raise ValueError("Name cannot be null")
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Name must be at least 2 characters long")
        return value


class ContactCreate(ContactBase):
    """Schema for creating new contact."""

    pass


class ContactUpdate(ContactBase):
    """Schema for updating contact (all fields optional).

    Only fields present in the payload are applied.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=100)


class ContactOut(ContactBase):
    """Schema for returning a contact."""

    name: str
    email: Optional[str] = None
    id: str
    owner_id: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True  # allow SQLAlchemy objects


class OwnerSummary(BaseModel):
    """Owning account shown in admin-wide listings."""

    id: str
    name: str
    email: str

    class Config:
        from_attributes = True


class ContactWithOwnerOut(ContactOut):
    """Contact plus a summary of its owner."""

    owner: OwnerSummary


class UserBase(BaseModel):
    """Shared fields for user schemas."""

    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=20, pattern=PHONE_PATTERN)


class UserCreate(UserBase):
    """Payload for self-registration."""

    password: str = Field(min_length=6)


class AdminUserCreate(UserCreate):
    """Payload for an admin creating an account."""

    role: Literal["user", "admin"] = "user"
    is_active: bool = True


class UserOut(BaseModel):
    """Response schema for user data."""

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    photo: Optional[str] = None
    role: str = "user"
    is_active: bool
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class Token(BaseModel):
    """JWT token response schema."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"


class TokenRefresh(BaseModel):
    """Schema for requesting a new access token from a refresh token."""

    refresh_token: str


class TokenData(BaseModel):
    """Payload stored inside JWT token."""

    sub: str | None = None
    exp: Optional[datetime] = None
    scope: Optional[str] = None
