# salus/db/models/users/user.py
from typing import Optional
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....constants import Role
from ....utils import utcnow

class User(SQLModel, table=True):
    __tablename__ = "users"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=100)
    email: Optional[str] = Field(max_length=255, default=None, unique=True, index=True)
    mobile_number: Optional[str] = Field(max_length=20, default=None, unique=True, index=True)
    address: Optional[str] = Field(max_length=255, default=None)
    pincode: Optional[str] = Field(max_length=20, default=None)
    avatar: Optional[str] = Field(max_length=500, default=None)
    role: str = Field(default=Role.USER.value, max_length=10)
    refresh_token: Optional[str] = Field(max_length=1000, default=None)
    is_blocked: bool = Field(default=False)
    is_verified: bool = Field(default=False)
    # social login ids
    google_id: Optional[str] = Field(default=None, index=True)
    facebook_id: Optional[str] = Field(default=None, index=True)
    apple_id: Optional[str] = Field(default=None, index=True)
    created_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
    updated_at: datetime = Field(default_factory=utcnow, sa_column=Column(DateTime(timezone=True), nullable=False))
