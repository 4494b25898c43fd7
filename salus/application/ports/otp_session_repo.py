from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True)
class OtpSessionDto:
    token: str
    contact: str
    code: str
    issued_at: datetime


class OtpSessionRepository(Protocol):
    def create(self, contact: str, code: str) -> str:
        ...

    def find_by_token(self, token: str) -> OtpSessionDto:
        ...

    def update_code(self, token: str, code: str) -> OtpSessionDto:
        ...
