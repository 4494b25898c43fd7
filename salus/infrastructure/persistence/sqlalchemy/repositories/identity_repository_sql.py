from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from .....constants import Role
from .....db.models import User
from .....application.ports.identity_repo import IdentityRepository, IdentityDto, NewIdentity
from .....exceptions import ConflictError, NotFoundError, PersistenceError
from .....utils import as_utc, is_email, utcnow


class SqlIdentityRepository(IdentityRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, user: User) -> IdentityDto:
        return IdentityDto(
            id=user.id,
            name=user.name,
            email=user.email,
            mobile_number=user.mobile_number,
            role=Role(user.role),
            is_verified=bool(user.is_verified),
            is_blocked=bool(user.is_blocked),
            refresh_token=user.refresh_token,
            created_at=as_utc(user.created_at),
            updated_at=as_utc(user.updated_at),
            address=user.address,
            pincode=user.pincode,
            avatar=user.avatar,
            google_id=user.google_id,
            facebook_id=user.facebook_id,
            apple_id=user.apple_id,
        )

    def _commit(self, user: User, message: str) -> User:
        try:
            self.session.add(user)
            self.session.commit()
            self.session.refresh(user)
            return user
        except IntegrityError as e:
            self.session.rollback()
            raise ConflictError("User with email or mobileNumber already exists", cause=e) from e
        except SQLAlchemyError as e:
            self.session.rollback()
            raise PersistenceError(message, cause=e) from e

    def find_by_contact(self, contact: str) -> Optional[IdentityDto]:
        column = User.email if is_email(contact) else User.mobile_number
        try:
            user = self.session.exec(select(User).where(column == contact)).first()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to get user by contact information", cause=e) from e
        return self._to_dto(user) if user else None

    def find_by_id(self, identity_id: str) -> Optional[IdentityDto]:
        try:
            user = self.session.get(User, identity_id)
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to find user by ID", cause=e) from e
        return self._to_dto(user) if user else None

    def create(self, data: NewIdentity) -> IdentityDto:
        clauses = []
        if data.email:
            clauses.append(User.email == data.email)
        if data.mobile_number:
            clauses.append(User.mobile_number == data.mobile_number)
        if clauses and self.session.exec(select(User).where(or_(*clauses))).first():
            raise ConflictError("User with email or mobileNumber already exists")

        user = User(
            name=data.name,
            email=data.email,
            mobile_number=data.mobile_number,
            role=data.role.value,
            address=data.address,
            pincode=data.pincode,
            avatar=data.avatar,
        )
        return self._to_dto(self._commit(user, "Failed to create the user"))

    def persist(self, identity: IdentityDto) -> IdentityDto:
        user = self.session.get(User, identity.id)
        if not user:
            raise NotFoundError("User not found")
        # role, email and mobile number are not changed through this path
        user.name = identity.name
        user.address = identity.address
        user.pincode = identity.pincode
        user.avatar = identity.avatar
        user.is_verified = identity.is_verified
        user.is_blocked = identity.is_blocked
        user.refresh_token = identity.refresh_token
        user.google_id = identity.google_id
        user.facebook_id = identity.facebook_id
        user.apple_id = identity.apple_id
        user.updated_at = utcnow()
        return self._to_dto(self._commit(user, "Failed to update user"))

    def clear_refresh_token(self, identity_id: str) -> None:
        user = self.session.get(User, identity_id)
        if not user:
            return
        user.refresh_token = None
        user.updated_at = utcnow()
        self._commit(user, "Failed to clear user refresh token")

    def list_all(self) -> List[IdentityDto]:
        try:
            users = self.session.exec(select(User).order_by(User.created_at)).all()
        except SQLAlchemyError as e:
            raise PersistenceError("Failed to find all users", cause=e) from e
        return [self._to_dto(u) for u in users]
