from datetime import datetime, timedelta
from typing import Callable

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from .....db.models import OtpSession
from .....application.ports.otp_session_repo import OtpSessionRepository, OtpSessionDto
from .....exceptions import NotFoundError, PersistenceError
from .....utils import as_utc, generate_session_token, utcnow


class SqlOtpSessionRepository(OtpSessionRepository):
    def __init__(self, session: Session, ttl_seconds: int = 300, clock: Callable[[], datetime] = utcnow):
        self.session = session
        self.ttl_seconds = ttl_seconds
        self.clock = clock

    def _to_dto(self, rec: OtpSession) -> OtpSessionDto:
        return OtpSessionDto(
            token=rec.uuid_token,
            contact=rec.contact_info,
            code=rec.otp,
            issued_at=as_utc(rec.issued_at),
        )

    def _get(self, token: str) -> OtpSession:
        rec = self.session.exec(select(OtpSession).where(OtpSession.uuid_token == token)).first()
        if not rec:
            raise NotFoundError("Otp session not found by uuidToken")
        return rec

    def create(self, contact: str, code: str) -> str:
        token = generate_session_token()
        try:
            self.purge_expired()
            rec = OtpSession(uuid_token=token, contact_info=contact, otp=code, issued_at=self.clock())
            self.session.add(rec)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError("Failed to create otp session", cause=e) from e
        return token

    def find_by_token(self, token: str) -> OtpSessionDto:
        try:
            return self._to_dto(self._get(token))
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to get otp session by uuidToken", cause=e) from e

    def update_code(self, token: str, code: str) -> OtpSessionDto:
        try:
            rec = self._get(token)
            rec.otp = code
            rec.issued_at = self.clock()
            self.session.add(rec)
            self.session.commit()
            self.session.refresh(rec)
            return self._to_dto(rec)
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError("Failed to update otp session", cause=e) from e

    def purge_expired(self) -> int:
        """Delete sessions older than the TTL; returns how many were removed."""
        cutoff = self.clock() - timedelta(seconds=self.ttl_seconds)
        expired = self.session.exec(select(OtpSession).where(OtpSession.issued_at < cutoff)).all()
        for rec in expired:
            self.session.delete(rec)
        self.session.commit()
        return len(expired)
