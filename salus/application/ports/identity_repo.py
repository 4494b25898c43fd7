from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Protocol

from ...constants import Role


@dataclass
class IdentityDto:
    id: str
    name: str
    email: Optional[str]
    mobile_number: Optional[str]
    role: Role
    is_verified: bool
    is_blocked: bool
    refresh_token: Optional[str]
    created_at: datetime
    updated_at: datetime
    address: Optional[str] = None
    pincode: Optional[str] = None
    avatar: Optional[str] = None
    google_id: Optional[str] = None
    facebook_id: Optional[str] = None
    apple_id: Optional[str] = None


@dataclass
class NewIdentity:
    name: str
    email: Optional[str]
    mobile_number: Optional[str]
    role: Role = Role.USER
    address: Optional[str] = None
    pincode: Optional[str] = None
    avatar: Optional[str] = None


class IdentityRepository(Protocol):
    def find_by_contact(self, contact: str) -> Optional[IdentityDto]:
        ...

    def find_by_id(self, identity_id: str) -> Optional[IdentityDto]:
        ...

    def create(self, data: NewIdentity) -> IdentityDto:
        ...

    def persist(self, identity: IdentityDto) -> IdentityDto:
        ...

    def clear_refresh_token(self, identity_id: str) -> None:
        ...

    def list_all(self) -> List[IdentityDto]:
        ...
