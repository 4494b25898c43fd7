import json
from datetime import datetime
from typing import Callable, Optional

import redis

from ...application.ports.otp_session_repo import OtpSessionRepository, OtpSessionDto
from ...exceptions import NotFoundError, PersistenceError
from ...utils import as_utc, generate_session_token, utcnow


class RedisOtpSessionStore(OtpSessionRepository):
    """OTP sessions as JSON strings under ``<prefix><token>`` with a key TTL.

    Redis reaps a session once its TTL runs out; resend rewrites the value and
    restarts the TTL.
    """

    def __init__(self, url: Optional[str] = None, ttl_seconds: int = 300, prefix: str = "otp:",
                 client: Optional["redis.Redis"] = None, clock: Callable[[], datetime] = utcnow) -> None:
        self.client = client or redis.Redis.from_url(url)
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix
        self.clock = clock

    def _key(self, token: str) -> str:
        return f"{self.prefix}{token}"

    def _expiry(self) -> int:
        # one second of slack keeps a session readable at exactly ttl_seconds
        return self.ttl_seconds + 1

    def _dump(self, session: OtpSessionDto) -> str:
        return json.dumps({
            "token": session.token,
            "contact": session.contact,
            "code": session.code,
            "issued_at": session.issued_at.isoformat(),
        })

    def _load(self, raw) -> OtpSessionDto:
        if isinstance(raw, bytes):
            raw = raw.decode()
        data = json.loads(raw)
        return OtpSessionDto(
            token=data["token"],
            contact=data["contact"],
            code=data["code"],
            issued_at=as_utc(datetime.fromisoformat(data["issued_at"])),
        )

    def create(self, contact: str, code: str) -> str:
        session = OtpSessionDto(token=generate_session_token(), contact=contact, code=code, issued_at=self.clock())
        try:
            stored = self.client.set(self._key(session.token), self._dump(session), ex=self._expiry(), nx=True)
        except redis.RedisError as e:
            raise PersistenceError("Failed to create otp session", cause=e) from e
        if not stored:
            raise PersistenceError("Failed to create otp session", errors=["uuidToken already exists"])
        return session.token

    def find_by_token(self, token: str) -> OtpSessionDto:
        try:
            raw = self.client.get(self._key(token))
        except redis.RedisError as e:
            raise PersistenceError("Failed to get otp session by uuidToken", cause=e) from e
        if raw is None:
            raise NotFoundError("Otp session not found by uuidToken")
        return self._load(raw)

    def update_code(self, token: str, code: str) -> OtpSessionDto:
        current = self.find_by_token(token)
        updated = OtpSessionDto(token=current.token, contact=current.contact, code=code, issued_at=self.clock())
        try:
            stored = self.client.set(self._key(token), self._dump(updated), ex=self._expiry(), xx=True)
        except redis.RedisError as e:
            raise PersistenceError("Failed to update otp session", cause=e) from e
        if not stored:
            raise NotFoundError("Otp session not found by uuidToken")
        return updated
