"""Request gate: claimed role from the URL, caller identity, role check.

The three checks are independent so routes can compose them. The FastAPI
wiring lives in ``dependencies.py``.
"""
import logging
from typing import Iterable, Mapping, Optional

from starlette.requests import Request

from .application.ports.identity_repo import IdentityDto, IdentityRepository
from .application.ports.token_service import TokenService
from .constants import ACCESS_TOKEN_COOKIE, Role
from .exceptions import ApiError, ForbiddenError, UnauthorizedError, ValidationError

logger = logging.getLogger(__name__)

ROLE_SEGMENT_INDEX = 3  # "/api/v1/<role>/..." -> ["", "api", "v1", "<role>", ...]

SESSION_USER_KEY = "user_id"
SESSION_AUTHENTICATED_KEY = "authenticated"


def extract_role(path: str) -> Role:
    if not path:
        raise ValidationError("Base url is empty")
    segments = path.split("/")
    segment = segments[ROLE_SEGMENT_INDEX] if len(segments) > ROLE_SEGMENT_INDEX else ""
    if not segment:
        raise ValidationError("Role is not specified in base URL")
    try:
        return Role(segment.upper())
    except ValueError:
        raise ValidationError(f"Unknown role '{segment}' in base URL")


def bearer_token_from(cookies: Mapping[str, str], authorization: Optional[str]) -> Optional[str]:
    token = cookies.get(ACCESS_TOKEN_COOKIE)
    if token:
        return token
    if authorization:
        scheme, _, credentials = authorization.partition(" ")
        if scheme.lower() == "bearer" and credentials.strip():
            return credentials.strip()
    return None


def _federated_identity(request: Request, identities: IdentityRepository) -> Optional[IdentityDto]:
    """Identity placed in the signed session cookie by an upstream OAuth login."""
    if "session" not in request.scope:
        return None
    user_id = request.session.get(SESSION_USER_KEY)
    if not user_id:
        return None
    if not request.session.get(SESSION_AUTHENTICATED_KEY):
        raise UnauthorizedError("Unauthorized access")
    identity = identities.find_by_id(str(user_id))
    if identity is None:
        raise UnauthorizedError("Invalid session, user not found")
    return identity


def authenticate_request(request: Request, identities: IdentityRepository, tokens: TokenService) -> IdentityDto:
    identity = _federated_identity(request, identities)
    if identity is None:
        token = bearer_token_from(request.cookies, request.headers.get("Authorization"))
        if not token:
            raise UnauthorizedError("Access denied, token not found")
        try:
            claims = tokens.decode_access_token(token)
            identity = identities.find_by_id(str(claims["sub"]))
        except ApiError:
            raise
        except Exception as e:
            raise UnauthorizedError("Invalid access token", cause=e) from e
        if identity is None:
            raise UnauthorizedError("Invalid access token, user not found")

    request.state.identity = identity
    return identity


def ensure_role_allowed(role: Role, allowed: Iterable[Role], identity: Optional[IdentityDto] = None) -> Role:
    allowed = tuple(allowed)
    if role not in allowed:
        names = " or ".join(r.value.capitalize() for r in allowed)
        raise ForbiddenError(f"{names} role not found")
    if identity is not None and identity.role != role:
        logger.warning(f"Identity {identity.id} with role {identity.role.value} used a {role.value} route")
        raise ForbiddenError(f"{role.value.capitalize()} role not found")
    return role
