from typing import Any, Dict, Protocol

from .identity_repo import IdentityDto


class TokenService(Protocol):
    def issue_access_token(self, identity: IdentityDto) -> str:
        ...

    def issue_refresh_token(self, identity: IdentityDto) -> str:
        ...

    def decode_access_token(self, token: str) -> Dict[str, Any]:
        ...

    def decode_refresh_token(self, token: str) -> Dict[str, Any]:
        ...
