from contextlib import asynccontextmanager
import logging

from dotenv import load_dotenv
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

# Load environment variables as early as possible
load_dotenv()

from .application.ports.identity_repo import NewIdentity
from .constants import API_PREFIX, Role
from .core.config import settings
from .database import create_db_and_tables, engine
from .exceptions import (
    ApiError,
    api_error_handler,
    http_exception_handler,
    unhandled_exception_handler,
    validation_exception_handler,
)
from .infrastructure.persistence.sqlalchemy.repositories.identity_repository_sql import SqlIdentityRepository
from .middleware import LoggingMiddleware, RequestSizeLimitMiddleware, SecurityMiddleware
from .routers import admin_router, auth_router, users_router
from .utils import utcnow

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.LOG_FORMAT
)
logger = logging.getLogger(__name__)


def seed_admin() -> None:
    """Create the configured admin account on first start."""
    if not settings.ADMIN_EMAIL or not settings.ADMIN_MOBILE_NUMBER:
        return
    with Session(engine) as session:
        identities = SqlIdentityRepository(session)
        if identities.find_by_contact(settings.ADMIN_EMAIL):
            return
        admin = identities.create(NewIdentity(
            name=settings.ADMIN_NAME,
            email=settings.ADMIN_EMAIL,
            mobile_number=settings.ADMIN_MOBILE_NUMBER,
            role=Role.ADMIN,
        ))
        logger.info(f"Seeded admin account {admin.id}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting {settings.APP_NAME}...")
    app.state.db_init_ok = True
    try:
        create_db_and_tables()
        seed_admin()
        logger.info("Database initialized successfully")
    except Exception:
        # Do not crash the app; report via health endpoint
        app.state.db_init_ok = False
        logger.exception("Database initialization failed")
    yield
    logger.info(f"Shutting down {settings.APP_NAME}...")


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        debug=settings.DEBUG,
        lifespan=lifespan,
        docs_url=("/docs" if settings.DOCS_ENABLED else None),
        redoc_url=("/redoc" if settings.DOCS_ENABLED else None),
        openapi_url=("/openapi.json" if settings.DOCS_ENABLED else None),
    )

    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    app.add_middleware(LoggingMiddleware)
    app.add_middleware(SecurityMiddleware)
    app.add_middleware(RequestSizeLimitMiddleware, max_body_size=settings.MAX_REQUEST_BODY_SIZE)
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="strict",
        https_only=settings.is_production,
    )
    origins = settings.allowed_origins_list
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # The same auth routes serve every role; the role is read back from the path.
    for role in Role:
        app.include_router(auth_router.router, prefix=f"{API_PREFIX}/{role.value.lower()}/auth")
    app.include_router(users_router.router)
    app.include_router(admin_router.router)

    @app.get("/health")
    def health_check():
        return {
            "status": "healthy" if getattr(app.state, "db_init_ok", True) else "degraded",
            "service": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "timestamp": utcnow().isoformat(),
        }

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("salus.main:app", host=settings.HOST, port=settings.PORT)
