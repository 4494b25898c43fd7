# Schemas package (re-export feature modules for stable imports)
from .auth.auth import LoginRequest, VerifyOTPRequest, ResendOTPRequest, RefreshTokenRequest
from .users.user import RegisterRequest, UserResponse

__all__ = [
    "LoginRequest",
    "VerifyOTPRequest",
    "ResendOTPRequest",
    "RefreshTokenRequest",
    "RegisterRequest",
    "UserResponse",
]
