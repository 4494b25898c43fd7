from enum import Enum
from typing import Any, Dict, Optional, Protocol


class AuditAction(str, Enum):
    LOGIN_OTP_SENT = "login_otp_sent"
    LOGIN_OTP_FAILED = "login_otp_failed"
    OTP_RESENT = "otp_resent"
    OTP_VERIFIED = "otp_verified"
    OTP_VERIFY_FAILED = "otp_verify_failed"
    LOGOUT = "logout"


class AuditLogger(Protocol):
    def log(self, action: AuditAction, contact: str, user_id: Optional[str] = None, request_id: Optional[str] = None,
            ip_address: Optional[str] = None, success: bool = True, details: Optional[Dict[str, Any]] = None) -> None:
        ...
