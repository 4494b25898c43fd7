import hashlib
import secrets
import string
import uuid
from datetime import datetime, timezone


# =========================
# OTP Generation
# =========================
def generate_otp(length: int = 6) -> str:
    """Generate a numeric OTP of ``length`` digits; leading zeros are kept."""
    return ''.join(secrets.choice(string.digits) for _ in range(length))


def generate_session_token() -> str:
    """Generate the opaque token that correlates login, verify and resend."""
    return str(uuid.uuid4())


# =========================
# Time
# =========================
def utcnow() -> datetime:
    """Timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Attach UTC to a timestamp read back without an offset (SQLite drops it)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


# =========================
# Contact info
# =========================
def is_email(contact: str) -> bool:
    return "@" in contact


def hash_contact(contact: str) -> str:
    """One-way hash of an email or phone number for logs"""
    return hashlib.sha256(contact.encode()).hexdigest()
