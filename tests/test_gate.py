import pytest
from starlette.requests import Request

from salus.constants import Role
from salus.exceptions import ForbiddenError, UnauthorizedError, ValidationError
from salus.gate import authenticate_request, bearer_token_from, ensure_role_allowed, extract_role
from salus.infrastructure.tokens.jwt_tokens import JwtTokenService


def make_request(path="/api/v1/user/auth/me", headers=None, session=None):
    scope = {
        "type": "http",
        "method": "GET",
        "path": path,
        "query_string": b"",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    if session is not None:
        scope["session"] = session
    return Request(scope)


@pytest.mark.parametrize("path,role", [
    ("/api/v1/user/auth/login", Role.USER),
    ("/api/v1/partner/auth/verify", Role.PARTNER),
    ("/api/v1/ADMIN/all-users", Role.ADMIN),
])
def test_extract_role(path, role):
    assert extract_role(path) == role


@pytest.mark.parametrize("path", ["", "/api/v1", "/api/v1/", "/api/v1/vendor/auth/login"])
def test_extract_role_rejects_missing_or_unknown(path):
    with pytest.raises(ValidationError) as exc:
        extract_role(path)
    assert exc.value.status_code == 400


def test_bearer_token_prefers_cookie():
    assert bearer_token_from({"accessToken": "c"}, "Bearer h") == "c"
    assert bearer_token_from({}, "Bearer h") == "h"
    assert bearer_token_from({}, "Basic abc") is None
    assert bearer_token_from({}, "Bearer ") is None
    assert bearer_token_from({}, None) is None


def test_authenticate_with_bearer_header(identities, tokens):
    access = tokens.issue_access_token(identities.find_by_id("user-1"))
    request = make_request(headers={"Authorization": f"Bearer {access}"})

    identity = authenticate_request(request, identities, tokens)

    assert identity.id == "user-1"
    assert request.state.identity is identity


def test_authenticate_with_cookie(identities, tokens):
    access = tokens.issue_access_token(identities.find_by_id("partner-1"))
    request = make_request(headers={"Cookie": f"accessToken={access}"})
    assert authenticate_request(request, identities, tokens).id == "partner-1"


def test_authenticate_without_token(identities, tokens):
    with pytest.raises(UnauthorizedError) as exc:
        authenticate_request(make_request(), identities, tokens)
    assert exc.value.status_code == 401


def test_authenticate_with_foreign_signature(identities, tokens):
    other = JwtTokenService(access_secret="someone-else", refresh_secret="x")
    access = other.issue_access_token(identities.find_by_id("user-1"))
    with pytest.raises(UnauthorizedError):
        authenticate_request(make_request(headers={"Authorization": f"Bearer {access}"}), identities, tokens)


def test_authenticate_with_refresh_token_is_rejected(identities):
    shared = JwtTokenService(access_secret="same", refresh_secret="same")
    refresh = shared.issue_refresh_token(identities.find_by_id("user-1"))
    with pytest.raises(UnauthorizedError):
        authenticate_request(make_request(headers={"Authorization": f"Bearer {refresh}"}), identities, shared)


def test_authenticate_deleted_identity(identities, tokens):
    access = tokens.issue_access_token(identities.find_by_id("user-1"))
    del identities.identities["user-1"]
    with pytest.raises(UnauthorizedError):
        authenticate_request(make_request(headers={"Authorization": f"Bearer {access}"}), identities, tokens)


def test_federated_session_identity(identities, tokens):
    request = make_request(session={"user_id": "user-1", "authenticated": True})
    assert authenticate_request(request, identities, tokens).id == "user-1"


def test_federated_session_must_be_authenticated(identities, tokens):
    request = make_request(session={"user_id": "user-1"})
    with pytest.raises(UnauthorizedError):
        authenticate_request(request, identities, tokens)


def test_empty_session_falls_back_to_token(identities, tokens):
    with pytest.raises(UnauthorizedError) as exc:
        authenticate_request(make_request(session={}), identities, tokens)
    assert exc.value.message == "Access denied, token not found"


def test_role_gate(identities):
    user = identities.find_by_id("user-1")
    assert ensure_role_allowed(Role.USER, [Role.USER, Role.ADMIN]) == Role.USER
    assert ensure_role_allowed(Role.USER, [Role.USER], user) == Role.USER

    with pytest.raises(ForbiddenError) as exc:
        ensure_role_allowed(Role.PARTNER, [Role.ADMIN])
    assert exc.value.message == "Admin role not found"

    # a USER token cannot be used on a PARTNER route
    with pytest.raises(ForbiddenError):
        ensure_role_allowed(Role.PARTNER, [Role.PARTNER, Role.USER], user)


def test_require_roles_without_authentication():
    from salus.dependencies import require_roles

    check = require_roles(Role.PARTNER, Role.ADMIN, authenticated=False)
    assert check(role=Role.ADMIN) == Role.ADMIN
    with pytest.raises(ForbiddenError) as exc:
        check(role=Role.USER)
    assert exc.value.message == "Partner or Admin role not found"


def test_require_roles_with_identity(identities):
    from salus.dependencies import require_roles

    check = require_roles(Role.USER)
    user = identities.find_by_id("user-1")
    assert check(role=Role.USER, identity=user) is user
    with pytest.raises(ForbiddenError):
        check(role=Role.USER, identity=identities.find_by_id("partner-1"))
