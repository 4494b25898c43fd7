# salus/db/models/auth/otp_session.py
from sqlalchemy import Column, DateTime
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

from ....utils import utcnow

class OtpSession(SQLModel, table=True):
    __tablename__ = "otp_sessions"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    uuid_token: str = Field(max_length=36, unique=True, index=True)
    contact_info: str = Field(max_length=255)
    otp: str = Field(max_length=12)
    issued_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
