import logging
import traceback
from enum import Enum
from typing import Any, List, Optional

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .core.config import settings

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "VALIDATION"
    NOT_FOUND = "NOT_FOUND"
    ROLE_MISMATCH = "ROLE_MISMATCH"
    FORBIDDEN = "FORBIDDEN"
    UNAUTHORIZED = "UNAUTHORIZED"
    SESSION_EXPIRED = "SESSION_EXPIRED"
    INVALID_CODE = "INVALID_CODE"
    CONFLICT = "CONFLICT"
    RATE_LIMITED = "RATE_LIMITED"
    PERSISTENCE = "PERSISTENCE"
    DELIVERY = "DELIVERY"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.ROLE_MISMATCH: 403,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.SESSION_EXPIRED: 400,
    ErrorKind.INVALID_CODE: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.PERSISTENCE: 500,
    ErrorKind.DELIVERY: 500,
}


class ApiError(Exception):
    """Application error carrying a kind, an HTTP status and the wrapped cause.

    ``errors`` holds supporting detail for the client (the message of the
    underlying failure, when there is one).
    """

    kind: ErrorKind = ErrorKind.PERSISTENCE

    def __init__(self, message: str, errors: Optional[List[Any]] = None,
                 cause: Optional[BaseException] = None, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if errors is None:
            errors = [str(cause)] if cause is not None else []
        self.errors = errors
        self.status_code = status_code or STATUS_BY_KIND[self.kind]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value}, status_code={self.status_code}, message={self.message!r})"


class ValidationError(ApiError):
    kind = ErrorKind.VALIDATION


class NotFoundError(ApiError):
    kind = ErrorKind.NOT_FOUND


class RoleMismatchError(ApiError):
    kind = ErrorKind.ROLE_MISMATCH


class ForbiddenError(ApiError):
    kind = ErrorKind.FORBIDDEN


class UnauthorizedError(ApiError):
    kind = ErrorKind.UNAUTHORIZED


class SessionExpiredError(ApiError):
    kind = ErrorKind.SESSION_EXPIRED


class InvalidCodeError(ApiError):
    kind = ErrorKind.INVALID_CODE


class ConflictError(ApiError):
    kind = ErrorKind.CONFLICT


class RateLimitedError(ApiError):
    kind = ErrorKind.RATE_LIMITED


class PersistenceError(ApiError):
    kind = ErrorKind.PERSISTENCE


class DeliveryError(ApiError):
    kind = ErrorKind.DELIVERY


def create_error_response(status_code: int, message: str, errors: Optional[List[Any]] = None,
                          exc: Optional[BaseException] = None) -> dict:
    """Create the standard error envelope"""
    body = {
        "success": False,
        "statusCode": status_code,
        "message": message,
        "errors": errors or [],
    }
    if exc is not None and not settings.is_production:
        body["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return body


def create_success_response(status_code: int, data: Any, message: str = "Success") -> dict:
    """Create the standard success envelope"""
    return {
        "success": status_code < 400,
        "statusCode": status_code,
        "message": message,
        "data": data,
    }


def _log_error(request: Request, status_code: int, message: str, errors: List[Any]) -> None:
    logger.error(
        "Error occurred: method=%s url=%s statusCode=%s message=%s errors=%s",
        request.method, request.url.path, status_code, message, errors,
    )


async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    _log_error(request, exc.status_code, exc.message, exc.errors)
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.status_code, exc.message, exc.errors, exc),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report request body problems as a 400 with the first issue as message"""
    issues = exc.errors()
    message = "Validation Error"
    if issues:
        message = str(issues[0].get("msg", message))
        if message.startswith("Value error, "):
            message = message[len("Value error, "):]
    errors = [
        {"field": ".".join(str(p) for p in issue.get("loc", ()) if p != "body"), "message": issue.get("msg")}
        for issue in issues
    ]
    _log_error(request, 400, message, errors)
    return JSONResponse(status_code=400, content=create_error_response(400, message, errors))


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Custom exception handler for HTTPException"""
    _log_error(request, exc.status_code, str(exc.detail), [])
    return JSONResponse(
        status_code=exc.status_code,
        content=create_error_response(exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(f"Unhandled error: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content=create_error_response(500, "Internal Server Error", [], exc),
    )
