# salus/routers/users_router.py
import logging

from fastapi import APIRouter, Depends

from ..application.ports.identity_repo import IdentityRepository, NewIdentity
from ..constants import API_PREFIX, Role
from ..dependencies import get_identity_repository
from ..exceptions import create_success_response
from ..schemas import RegisterRequest, UserResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix=f"{API_PREFIX}/user", tags=["Users"])


@router.post("/register", status_code=201)
def register_user(payload: RegisterRequest, identities: IdentityRepository = Depends(get_identity_repository)):
    identity = identities.create(NewIdentity(
        name=payload.name,
        email=str(payload.email),
        mobile_number=payload.mobileNumber,
        role=Role.USER,
        address=payload.address,
        pincode=payload.pincode,
        avatar=str(payload.avatar) if payload.avatar else None,
    ))
    logger.info(f"Registered user {identity.id}")
    return create_success_response(
        201,
        UserResponse.from_identity(identity).model_dump(mode="json"),
        "User registered successfully",
    )
