# salus/schemas/auth.py
import re
import uuid
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

MOBILE_NUMBER_PATTERN = re.compile(r'\+[1-9][0-9]{1,14}')
OTP_PATTERN = re.compile(r'[0-9]{6}')


def validate_mobile_number(v: Optional[str]) -> Optional[str]:
    if v is None:
        return v
    if not MOBILE_NUMBER_PATTERN.fullmatch(v):
        raise ValueError("Invalid mobile number format. It should start with a '+' followed by the country code and mobile number.")
    return v


def validate_uuid_token(v: str) -> str:
    """Accept only the canonical 8-4-4-4-12 hex form."""
    try:
        parsed = str(uuid.UUID(v))
    except (ValueError, TypeError, AttributeError):
        raise ValueError('Invalid uuidToken')
    if parsed != v.lower():
        raise ValueError('Invalid uuidToken')
    return parsed


class LoginRequest(BaseModel):
    email: Optional[EmailStr] = Field(None, description="Email address to send the OTP to")
    mobileNumber: Optional[str] = Field(None, description="Mobile number with country code")

    @field_validator('mobileNumber')
    @classmethod
    def check_mobile_number(cls, v):
        return validate_mobile_number(v)

    @model_validator(mode='after')
    def exactly_one_contact(self):
        if not self.email and not self.mobileNumber:
            raise ValueError('Either email or mobile number must be provided')
        if self.email and self.mobileNumber:
            raise ValueError('Provide either email or mobile number, not both')
        return self

    @property
    def contact(self) -> str:
        return str(self.email) if self.email else self.mobileNumber


class VerifyOTPRequest(BaseModel):
    uuidToken: str
    otp: str

    @field_validator('uuidToken')
    @classmethod
    def check_uuid_token(cls, v):
        return validate_uuid_token(v)

    @field_validator('otp')
    @classmethod
    def check_otp(cls, v):
        if not OTP_PATTERN.fullmatch(v):
            raise ValueError('Invalid OTP format')
        return v


class ResendOTPRequest(BaseModel):
    uuidToken: str

    @field_validator('uuidToken')
    @classmethod
    def check_uuid_token(cls, v):
        return validate_uuid_token(v)


class RefreshTokenRequest(BaseModel):
    refreshToken: Optional[str] = None
