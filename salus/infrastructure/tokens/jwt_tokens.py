import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

import jwt

from ...application.ports.identity_repo import IdentityDto
from ...application.ports.token_service import TokenService
from ...exceptions import UnauthorizedError


class JwtTokenService(TokenService):
    """HS256 access/refresh tokens; each kind has its own secret and lifetime."""

    def __init__(self, access_secret: str, refresh_secret: str,
                 access_expires: timedelta = timedelta(minutes=15),
                 refresh_expires: timedelta = timedelta(days=10),
                 algorithm: str = "HS256"):
        self.access_secret = access_secret
        self.refresh_secret = refresh_secret
        self.access_expires = access_expires
        self.refresh_expires = refresh_expires
        self.algorithm = algorithm

    def _encode(self, data: Dict[str, Any], secret: str, expires_delta: timedelta) -> str:
        to_encode = data.copy()
        expire = datetime.now(timezone.utc) + expires_delta
        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, secret, algorithm=self.algorithm)

    def _decode(self, token: str, secret: str, expected_type: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, secret, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError as e:
            raise UnauthorizedError("Token expired", cause=e) from e
        except jwt.PyJWTError as e:
            raise UnauthorizedError("Invalid token", cause=e) from e
        if payload.get("type") != expected_type or not payload.get("sub"):
            raise UnauthorizedError("Invalid token payload")
        return payload

    def issue_access_token(self, identity: IdentityDto) -> str:
        return self._encode(
            {
                "sub": identity.id,
                "email": identity.email,
                "mobileNumber": identity.mobile_number,
                "name": identity.name,
                "role": identity.role.value,
                "type": "access",
            },
            self.access_secret,
            self.access_expires,
        )

    def issue_refresh_token(self, identity: IdentityDto) -> str:
        # jti keeps two refresh tokens minted in the same second distinct
        return self._encode(
            {"sub": identity.id, "type": "refresh", "jti": secrets.token_urlsafe(16)},
            self.refresh_secret,
            self.refresh_expires,
        )

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self.access_secret, "access")

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        return self._decode(token, self.refresh_secret, "refresh")
