# salus/routers/admin_router.py
from fastapi import APIRouter, Depends

from ..application.ports.identity_repo import IdentityRepository
from ..constants import API_PREFIX
from ..dependencies import get_identity_repository, require_admin
from ..exceptions import create_success_response
from ..schemas import UserResponse

router = APIRouter(prefix=f"{API_PREFIX}/admin", tags=["Admin"], dependencies=[Depends(require_admin)])


@router.get("/all-users")
def get_all_users(identities: IdentityRepository = Depends(get_identity_repository)):
    users = [UserResponse.from_identity(u).model_dump(mode="json") for u in identities.list_all()]
    return create_success_response(200, users, "All users fetched successfully")
