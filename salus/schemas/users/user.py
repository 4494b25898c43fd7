# salus/schemas/users/user.py
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, HttpUrl, field_validator

from ...application.ports.identity_repo import IdentityDto
from ..auth.auth import validate_mobile_number


class RegisterRequest(BaseModel):
    name: str = Field(..., max_length=100)
    email: EmailStr
    mobileNumber: str
    address: Optional[str] = Field(None, min_length=1, max_length=255)
    pincode: Optional[str] = Field(None, max_length=20)
    avatar: Optional[HttpUrl] = None

    @field_validator('name')
    @classmethod
    def check_name(cls, v):
        v = v.strip()
        if len(v) < 5:
            raise ValueError('Name is required')
        return v

    @field_validator('mobileNumber')
    @classmethod
    def check_mobile_number(cls, v):
        return validate_mobile_number(v)

    @field_validator('address')
    @classmethod
    def strip_address(cls, v):
        return v.strip() if v is not None else v


class UserResponse(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    mobileNumber: Optional[str] = None
    address: Optional[str] = None
    pincode: Optional[str] = None
    avatar: Optional[str] = None
    role: str
    isVerified: bool
    isBlocked: bool
    createdAt: datetime
    updatedAt: datetime

    @classmethod
    def from_identity(cls, identity: IdentityDto) -> "UserResponse":
        return cls(
            id=identity.id,
            name=identity.name,
            email=identity.email,
            mobileNumber=identity.mobile_number,
            address=identity.address,
            pincode=identity.pincode,
            avatar=identity.avatar,
            role=identity.role.value,
            isVerified=identity.is_verified,
            isBlocked=identity.is_blocked,
            createdAt=identity.created_at,
            updatedAt=identity.updated_at,
        )
