from dataclasses import replace
from datetime import timedelta

import pytest

from salus.application.ports.identity_repo import NewIdentity
from salus.constants import Role
from salus.exceptions import ConflictError, NotFoundError
from salus.infrastructure.persistence.sqlalchemy.repositories.identity_repository_sql import SqlIdentityRepository


@pytest.fixture
def repo(db_session):
    return SqlIdentityRepository(db_session)


@pytest.fixture
def alice(repo):
    return repo.create(NewIdentity(name="Alice Doe", email="a@b.com", mobile_number="+15551234567"))


def test_create_defaults_to_user_role(alice):
    assert alice.role == Role.USER
    assert alice.is_verified is False
    assert alice.is_blocked is False
    assert alice.refresh_token is None


def test_find_by_contact_uses_email_or_mobile(repo, alice):
    assert repo.find_by_contact("a@b.com").id == alice.id
    assert repo.find_by_contact("+15551234567").id == alice.id
    assert repo.find_by_contact("nobody@b.com") is None
    assert repo.find_by_contact("+15550000000") is None


def test_find_by_id(repo, alice):
    assert repo.find_by_id(alice.id).email == "a@b.com"
    assert repo.find_by_id("missing") is None


def test_duplicate_contact_conflicts(repo, alice):
    with pytest.raises(ConflictError):
        repo.create(NewIdentity(name="Other User", email="a@b.com", mobile_number="+15550000000"))
    with pytest.raises(ConflictError):
        repo.create(NewIdentity(name="Other User", email="o@b.com", mobile_number="+15551234567"))


def test_persist_updates_refresh_token_and_verification(repo, alice):
    saved = repo.persist(replace(alice, refresh_token="r1", is_verified=True))

    assert saved.refresh_token == "r1"
    assert saved.is_verified is True
    assert repo.find_by_id(alice.id).refresh_token == "r1"


def test_persist_does_not_change_role(repo, alice):
    saved = repo.persist(replace(alice, role=Role.ADMIN))
    assert saved.role == Role.USER


def test_persist_missing_identity(repo, alice):
    with pytest.raises(NotFoundError):
        repo.persist(replace(alice, id="missing"))


def test_clear_refresh_token(repo, alice):
    repo.persist(replace(alice, refresh_token="r1"))
    repo.clear_refresh_token(alice.id)
    assert repo.find_by_id(alice.id).refresh_token is None
    # unknown ids are ignored
    repo.clear_refresh_token("missing")


def test_list_all(repo, alice):
    repo.create(NewIdentity(name="Pat Partner", email="p@b.com", mobile_number=None, role=Role.PARTNER))
    users = repo.list_all()
    assert {u.email: u.role for u in users} == {"a@b.com": Role.USER, "p@b.com": Role.PARTNER}



def test_timestamps_are_timezone_aware(repo, alice):
    assert alice.created_at.tzinfo is not None
    assert alice.created_at.utcoffset() == timedelta(0)

    saved = repo.persist(replace(alice, name="Alice Smith"))

    assert saved.updated_at.tzinfo is not None
    assert saved.updated_at >= alice.created_at
    assert repo.find_by_id(alice.id).updated_at == saved.updated_at
