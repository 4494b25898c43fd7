import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

from salus.application.services.auth_service import AuthService
from salus.constants import Role
from salus.infrastructure.tokens.jwt_tokens import JwtTokenService

from fakes import FakeClock, FakeIdentityRepo, FakeNotifier, FakeOtpSessionRepo, SequentialOtp


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def identities():
    repo = FakeIdentityRepo()
    repo.add("user-1", "Alice Doe", email="a@b.com", mobile_number="+15551234567")
    repo.add("partner-1", "Pat Partner", email="partner@salus.io", role=Role.PARTNER)
    repo.add("blocked-1", "Bob Blocked", mobile_number="+15557654321", is_blocked=True)
    return repo


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def tokens():
    return JwtTokenService(access_secret="access-secret", refresh_secret="refresh-secret")


@pytest.fixture
def service(clock, identities, notifier, tokens):
    return AuthService(
        otp_sessions=FakeOtpSessionRepo(clock),
        identities=identities,
        notifier=notifier,
        tokens=tokens,
        clock=clock,
        otp_generator=SequentialOtp(),
    )


@pytest.fixture
def engine():
    from salus.db import models  # noqa: F401

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture
def db_session(engine):
    with Session(engine) as session:
        yield session
