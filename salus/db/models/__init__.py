# Models package (re-export feature modules for stable imports)
from .users.user import User
from .auth.otp_session import OtpSession

__all__ = [
    "User",
    "OtpSession",
]
