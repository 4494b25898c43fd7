import logging
from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Callable, Tuple

from ..ports.identity_repo import IdentityRepository, IdentityDto
from ..ports.notifier import ContactNotifier
from ..ports.otp_session_repo import OtpSessionRepository, OtpSessionDto
from ..ports.token_service import TokenService
from ...constants import Role
from ...exceptions import (
    ApiError,
    DeliveryError,
    ForbiddenError,
    InvalidCodeError,
    NotFoundError,
    PersistenceError,
    RoleMismatchError,
    SessionExpiredError,
    UnauthorizedError,
)
from ...utils import as_utc, generate_otp, is_email, utcnow

logger = logging.getLogger(__name__)

OTP_SESSION_NOT_FOUND_STATUS = 402


@dataclass
class AuthService:
    """Role-scoped OTP login: issue a code, verify it, hand out tokens.

    A login attempt is PENDING once its OTP session exists and the code went
    out. ``verify_role_by_otp`` moves it to VERIFIED; an expired session or a
    wrong code fails without changing the session, so the client may resend
    or start a new login.
    """

    otp_sessions: OtpSessionRepository
    identities: IdentityRepository
    notifier: ContactNotifier
    tokens: TokenService
    clock: Callable[[], datetime] = utcnow
    otp_generator: Callable[[], str] = field(default=generate_otp)
    otp_ttl_seconds: int = 300

    # ------------------------------------------------------------------
    # Flow
    # ------------------------------------------------------------------
    async def authenticate_role(self, contact: str, role: Role) -> Tuple[IdentityDto, str]:
        identity = self._find_identity_by_contact(contact)
        if identity.role != role:
            raise RoleMismatchError(f"{role.value.capitalize()} role not found for this account")
        if identity.is_blocked:
            raise ForbiddenError("Account is blocked")

        code = self.otp_generator()
        token = self._call_store(lambda: self.otp_sessions.create(contact, code), "Failed to create otp session")
        logger.info(f"OTP session created for {role.value} {identity.id}")

        # The session is kept even if delivery fails; the client can resend.
        await self._deliver(contact, code)
        return identity, token

    async def verify_role_by_otp(self, token: str, code: str) -> Tuple[IdentityDto, str, str]:
        session = self._find_session(token)
        self._ensure_not_expired(session)
        if code != session.code:
            raise InvalidCodeError("Invalid OTP, please try again")

        identity = self._find_identity_by_contact(session.contact)
        access_token = self.tokens.issue_access_token(identity)
        refresh_token = self.tokens.issue_refresh_token(identity)
        identity = self._call_store(
            lambda: self.identities.persist(replace(identity, refresh_token=refresh_token, is_verified=True)),
            "Failed to store refresh token",
        )
        logger.info(f"OTP verified for {identity.role.value} {identity.id}")
        return identity, access_token, refresh_token

    async def resend_otp(self, token: str) -> OtpSessionDto:
        session = self._find_session(token)
        self._ensure_not_expired(session)

        code = self.otp_generator()
        updated = self._call_store(lambda: self.otp_sessions.update_code(token, code), "Failed to update otp session")
        await self._deliver(updated.contact, updated.code)
        return updated

    async def refresh_access_token(self, refresh_token: str) -> Tuple[IdentityDto, str]:
        claims = self.tokens.decode_refresh_token(refresh_token)
        identity = self._call_store(lambda: self.identities.find_by_id(str(claims.get("sub"))), "Failed to find user by ID")
        if identity is None or identity.refresh_token != refresh_token:
            raise UnauthorizedError("Refresh token is expired or revoked")
        return identity, self.tokens.issue_access_token(identity)

    async def logout(self, identity_id: str) -> None:
        self._call_store(lambda: self.identities.clear_refresh_token(identity_id), "Failed to clear user refresh token")

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def session_age_seconds(self, session: OtpSessionDto) -> float:
        return (as_utc(self.clock()) - as_utc(session.issued_at)).total_seconds()

    def _ensure_not_expired(self, session: OtpSessionDto) -> None:
        # Inclusive window: an age of exactly otp_ttl_seconds is still valid.
        if self.session_age_seconds(session) > self.otp_ttl_seconds:
            raise SessionExpiredError("OTP session is expired")

    def _find_session(self, token: str) -> OtpSessionDto:
        try:
            return self._call_store(lambda: self.otp_sessions.find_by_token(token), "Failed to get otp session by uuidToken")
        except NotFoundError as e:
            raise NotFoundError("OTP session not found", errors=e.errors, cause=e,
                                status_code=OTP_SESSION_NOT_FOUND_STATUS)

    def _find_identity_by_contact(self, contact: str) -> IdentityDto:
        identity = self._call_store(lambda: self.identities.find_by_contact(contact), "Failed to get user by contact information")
        if identity is None:
            raise NotFoundError("User not found")
        return identity

    def _call_store(self, operation, message: str):
        try:
            return operation()
        except ApiError:
            raise
        except Exception as e:
            logger.error(f"{message}: {e}")
            raise PersistenceError(message, cause=e) from e

    async def _deliver(self, contact: str, code: str) -> None:
        try:
            if is_email(contact):
                await self.notifier.send_email(contact, code)
            else:
                await self.notifier.send_sms(contact, code)
        except DeliveryError:
            raise
        except Exception as e:
            logger.error(f"Failed to send OTP: {e}")
            raise DeliveryError("Failed to send OTP", cause=e) from e
