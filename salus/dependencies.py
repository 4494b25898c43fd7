from datetime import timedelta
from functools import lru_cache

from fastapi import Depends, Request
from sqlmodel import Session

from .application.ports.audit_logger import AuditLogger
from .application.ports.identity_repo import IdentityDto, IdentityRepository
from .application.ports.notifier import ContactNotifier
from .application.ports.otp_session_repo import OtpSessionRepository
from .application.ports.rate_limiter import RateLimiter
from .application.ports.token_service import TokenService
from .application.services.auth_service import AuthService
from .constants import Role
from .core.config import settings
from .database import get_session
from .exceptions import RateLimitedError
from .gate import authenticate_request, ensure_role_allowed, extract_role
from .infrastructure.audit.std_logger import StdAuditLogger
from .infrastructure.notifications.brevo_email import BrevoEmailSender
from .infrastructure.notifications.notifier import NotificationService
from .infrastructure.notifications.twilio_sms import TwilioSmsSender
from .infrastructure.otp_sessions.redis_store import RedisOtpSessionStore
from .infrastructure.persistence.sqlalchemy.repositories.identity_repository_sql import SqlIdentityRepository
from .infrastructure.persistence.sqlalchemy.repositories.otp_session_repository_sql import SqlOtpSessionRepository
from .infrastructure.rate_limit.memory_rate_limiter import InMemoryRateLimiter
from .infrastructure.rate_limit.redis_rate_limiter import RedisRateLimiter
from .infrastructure.tokens.jwt_tokens import JwtTokenService
from .utils import generate_otp


# ------------------------
# Adapters
# ------------------------
def get_identity_repository(session: Session = Depends(get_session)) -> IdentityRepository:
    return SqlIdentityRepository(session)


@lru_cache()
def _redis_otp_store() -> RedisOtpSessionStore:
    return RedisOtpSessionStore(url=settings.REDIS_URL, ttl_seconds=settings.OTP_TTL_SECONDS)


def get_otp_session_repository(session: Session = Depends(get_session)) -> OtpSessionRepository:
    if settings.OTP_SESSION_BACKEND == "redis" and settings.REDIS_URL:
        return _redis_otp_store()
    return SqlOtpSessionRepository(session, ttl_seconds=settings.OTP_TTL_SECONDS)


@lru_cache()
def get_notifier() -> ContactNotifier:
    sms = TwilioSmsSender(
        settings.TWILIO_ACCOUNT_SID,
        settings.TWILIO_AUTH_TOKEN,
        settings.TWILIO_PHONE_NUMBER,
        timeout=settings.NOTIFIER_TIMEOUT_SECONDS,
    )
    email = BrevoEmailSender(
        settings.BREVO_API_KEY,
        settings.EMAIL_FROM_ADDRESS,
        settings.EMAIL_FROM_NAME,
        timeout=settings.NOTIFIER_TIMEOUT_SECONDS,
    )
    return NotificationService(sms, email, sender_name=settings.EMAIL_FROM_NAME, otp_ttl_seconds=settings.OTP_TTL_SECONDS)


@lru_cache()
def get_token_service() -> TokenService:
    return JwtTokenService(
        access_secret=settings.JWT_ACCESS_TOKEN_SECRET_KEY,
        refresh_secret=settings.JWT_REFRESH_TOKEN_SECRET_KEY,
        access_expires=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        refresh_expires=timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        algorithm=settings.JWT_ALGORITHM,
    )


@lru_cache()
def get_rate_limiter() -> RateLimiter:
    if settings.REDIS_URL:
        return RedisRateLimiter(url=settings.REDIS_URL)
    return InMemoryRateLimiter()


@lru_cache()
def get_audit_logger() -> AuditLogger:
    return StdAuditLogger()


def get_auth_service(
    otp_sessions: OtpSessionRepository = Depends(get_otp_session_repository),
    identities: IdentityRepository = Depends(get_identity_repository),
    notifier: ContactNotifier = Depends(get_notifier),
    tokens: TokenService = Depends(get_token_service),
) -> AuthService:
    return AuthService(
        otp_sessions=otp_sessions,
        identities=identities,
        notifier=notifier,
        tokens=tokens,
        otp_generator=lambda: generate_otp(settings.OTP_LENGTH),
        otp_ttl_seconds=settings.OTP_TTL_SECONDS,
    )


# ------------------------
# Request gate
# ------------------------
def get_claimed_role(request: Request) -> Role:
    role = extract_role(request.url.path)
    request.state.role = role
    return role


def get_current_identity(
    request: Request,
    identities: IdentityRepository = Depends(get_identity_repository),
    tokens: TokenService = Depends(get_token_service),
) -> IdentityDto:
    return authenticate_request(request, identities, tokens)


def require_roles(*allowed: Role, authenticated: bool = True):
    """Dependency factory: the URL role must be one of ``allowed``.

    With ``authenticated`` the caller must also hold a valid identity whose
    stored role is the URL role.
    """
    if authenticated:
        def dependency(role: Role = Depends(get_claimed_role),
                       identity: IdentityDto = Depends(get_current_identity)) -> IdentityDto:
            ensure_role_allowed(role, allowed, identity)
            return identity
    else:
        def dependency(role: Role = Depends(get_claimed_role)) -> Role:
            return ensure_role_allowed(role, allowed)
    return dependency


require_admin = require_roles(Role.ADMIN)
require_any_role = require_roles(Role.USER, Role.PARTNER, Role.ADMIN)


def enforce_rate_limit(limiter: RateLimiter, key: str) -> None:
    if not limiter.allow(key, settings.OTP_RATE_LIMIT_MAX_REQUESTS, settings.OTP_RATE_LIMIT_WINDOW_SECONDS):
        raise RateLimitedError("Too many OTP requests. Please try again later.")
