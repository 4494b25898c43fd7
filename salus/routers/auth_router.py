# salus/routers/auth_router.py
import logging
import uuid
from typing import Dict, Optional

from fastapi import APIRouter, Depends, Request, Response

from ..application.ports.audit_logger import AuditAction, AuditLogger
from ..application.ports.identity_repo import IdentityDto
from ..application.ports.rate_limiter import RateLimiter, rate_limit_key
from ..application.services.auth_service import AuthService
from ..constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE, Role
from ..core.config import settings
from ..dependencies import (
    enforce_rate_limit,
    get_audit_logger,
    get_auth_service,
    get_claimed_role,
    get_rate_limiter,
    require_any_role,
)
from ..exceptions import ApiError, UnauthorizedError, create_success_response
from ..schemas import LoginRequest, RefreshTokenRequest, ResendOTPRequest, UserResponse, VerifyOTPRequest

logger = logging.getLogger(__name__)

# Mounted once per role under /api/v1/<role>/auth
router = APIRouter(tags=["Authentication"])

COOKIE_OPTIONS = {
    "httponly": True,
    "secure": True,
    "samesite": "strict",
}


def get_client_info(request: Request) -> Dict[str, Optional[str]]:
    return {
        'ip_address': request.client.host if request.client else None,
        'user_agent': request.headers.get('user-agent'),
    }


def set_token_cookies(response: Response, access_token: str, refresh_token: Optional[str] = None) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE, access_token,
        max_age=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES * 60, **COOKIE_OPTIONS,
    )
    if refresh_token is not None:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE, refresh_token,
            max_age=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS * 24 * 60 * 60, **COOKIE_OPTIONS,
        )


def _user_json(identity: IdentityDto) -> dict:
    return UserResponse.from_identity(identity).model_dump(mode="json")


@router.post("/login")
async def login(
    payload: LoginRequest,
    request: Request,
    role: Role = Depends(get_claimed_role),
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Check the account holds the URL role and send it an OTP."""
    request_id = str(uuid.uuid4())
    client_info = get_client_info(request)
    contact = payload.contact

    try:
        enforce_rate_limit(limiter, rate_limit_key("login", role.value, contact))
        identity, uuid_token = await auth_service.authenticate_role(contact, role)
    except ApiError as e:
        audit.log(AuditAction.LOGIN_OTP_FAILED, contact, request_id=request_id,
                  ip_address=client_info['ip_address'], success=False,
                  details={'role': role.value, 'error': e.kind.value})
        raise

    audit.log(AuditAction.LOGIN_OTP_SENT, contact, identity.id, request_id,
              client_info['ip_address'], True, {'role': role.value})
    return create_success_response(
        200,
        {"user": _user_json(identity), "uuidToken": uuid_token},
        f"{role.value} verified, OTP message is sent to {contact}, please verify your OTP",
    )


@router.post("/verify")
async def verify(
    payload: VerifyOTPRequest,
    request: Request,
    response: Response,
    role: Role = Depends(get_claimed_role),
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
):
    """Check the OTP for a login attempt and issue access/refresh tokens."""
    request_id = str(uuid.uuid4())
    client_info = get_client_info(request)

    try:
        identity, access_token, refresh_token = await auth_service.verify_role_by_otp(payload.uuidToken, payload.otp)
    except ApiError as e:
        audit.log(AuditAction.OTP_VERIFY_FAILED, '', request_id=request_id,
                  ip_address=client_info['ip_address'], success=False,
                  details={'role': role.value, 'error': e.kind.value})
        raise

    audit.log(AuditAction.OTP_VERIFIED, identity.email or identity.mobile_number or '', identity.id,
              request_id, client_info['ip_address'], True, {'role': role.value})
    set_token_cookies(response, access_token, refresh_token)
    return create_success_response(
        200,
        {"user": _user_json(identity), "accessToken": access_token, "refreshToken": refresh_token},
        f"{role.value} OTP verified successfully",
    )


@router.post("/resend")
async def resend(
    payload: ResendOTPRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Send a fresh code for an existing login attempt."""
    enforce_rate_limit(limiter, rate_limit_key("resend", payload.uuidToken))
    session = await auth_service.resend_otp(payload.uuidToken)
    audit.log(AuditAction.OTP_RESENT, session.contact, request_id=str(uuid.uuid4()),
              ip_address=get_client_info(request)['ip_address'])
    return create_success_response(200, {}, "OTP resent successfully.")


@router.post("/refresh")
async def refresh(
    request: Request,
    response: Response,
    payload: Optional[RefreshTokenRequest] = None,
    role: Role = Depends(get_claimed_role),
    auth_service: AuthService = Depends(get_auth_service),
):
    """Trade a stored, unrevoked refresh token for a new access token."""
    token = (payload.refreshToken if payload else None) or request.cookies.get(REFRESH_TOKEN_COOKIE)
    if not token:
        raise UnauthorizedError("Refresh token not found")
    identity, access_token = await auth_service.refresh_access_token(token)
    if identity.role != role:
        raise UnauthorizedError("Refresh token does not belong to this role")
    set_token_cookies(response, access_token)
    return create_success_response(200, {"accessToken": access_token}, "Access token refreshed")


@router.post("/logout")
async def logout(
    request: Request,
    response: Response,
    identity: IdentityDto = Depends(require_any_role),
    auth_service: AuthService = Depends(get_auth_service),
    audit: AuditLogger = Depends(get_audit_logger),
):
    await auth_service.logout(identity.id)
    audit.log(AuditAction.LOGOUT, identity.email or identity.mobile_number or '', identity.id,
              str(uuid.uuid4()), get_client_info(request)['ip_address'])
    response.delete_cookie(ACCESS_TOKEN_COOKIE, **COOKIE_OPTIONS)
    response.delete_cookie(REFRESH_TOKEN_COOKIE, **COOKIE_OPTIONS)
    return create_success_response(200, {}, "Logged out successfully")



@router.get("/me")
async def me(identity: IdentityDto = Depends(require_any_role)):
    return create_success_response(200, {"user": _user_json(identity)}, "Current user")
