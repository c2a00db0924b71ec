# tests/unit/services/test_auth_service.py
from __future__ import annotations

from datetime import timedelta

import pytest

from shortlink.models.base import utcnow
from shortlink.services._shared.errors import (
    ConflictError,
    ExpiredError,
    NotFoundError,
    OwnerNotFoundError,
    ServiceError,
)
from shortlink.services._shared.ports import InMemoryValidationCache, StubTokenSigner
from shortlink.services.auth.dto import AuthOut, LoginIn, RegisterIn
from shortlink.services.auth.service import AuthService
from shortlink.services.auth.validation import TokenValidationService
from tests.factories.refresh_token import RefreshTokenFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def signer() -> StubTokenSigner:
    return StubTokenSigner()


@pytest.fixture()
def service(signer) -> AuthService:
    """
    Build an AuthService wired to in-memory doubles.

    .. note::
       Refresh tokens still go through the database.
    """
    return AuthService(
        signer=signer,
        validation=TokenValidationService(signer=signer, cache=InMemoryValidationCache()),
    )


@pytest.fixture()
def alice(session):
    user = UserFactory(username="alice", email="alice@example.com")
    session.commit()
    return user


# -------------------------------- Tests ----------------------------------- #
def test_register_creates_owner_and_grants_tokens(service):
    out = service.register(RegisterIn(username="carol", email="Carol@Example.com", password="s3cret!"))

    assert isinstance(out, AuthOut)
    assert out.username == "carol"
    assert out.token_type == "Bearer"
    assert out.access_token == "access.carol.1"
    assert service.tokens.find(out.refresh_token) is not None
    assert service.login(LoginIn(username="carol", password="s3cret!")).username == "carol"


def test_register_duplicate_username(service, alice):
    with pytest.raises(ConflictError):
        service.register(RegisterIn(username="alice", email="other@example.com", password="x1"))


def test_register_duplicate_email(service, alice):
    with pytest.raises(ConflictError):
        service.register(RegisterIn(username="other", email="alice@example.com", password="x1"))


def test_register_rejects_bad_input(service):
    with pytest.raises(ServiceError):
        service.register(RegisterIn(username="dave", email="not-an-email", password="x1"))
    with pytest.raises(ServiceError):
        service.register(RegisterIn(username="dave", email="dave@example.com", password=""))


def test_login_issues_pair(service, alice):
    out = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

    assert out.username == "alice"
    assert out.access_token.startswith("access.alice.")
    refresh = service.tokens.find(out.refresh_token)
    assert refresh is not None
    assert refresh.owner_id == alice.id


def test_login_rotates_refresh_token(service, alice):
    first = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
    second = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

    assert service.tokens.find(first.refresh_token) is None
    assert service.tokens.find(second.refresh_token) is not None


@pytest.mark.parametrize(
    "username, password",
    [("alice", "wrong"), ("missing", DEFAULT_PASSWORD)],
)
def test_login_invalid_credentials(service, alice, username, password):
    with pytest.raises(ServiceError, match="Invalid username or password"):
        service.login(LoginIn(username=username, password=password))


def test_refresh_keeps_refresh_token_and_signs_new_access(service, alice):
    granted = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

    refreshed = service.refresh(granted.refresh_token)

    assert refreshed.refresh_token == granted.refresh_token
    assert refreshed.refresh_expires_at == granted.refresh_expires_at
    assert refreshed.access_token != granted.access_token
    assert service.validate(refreshed.access_token).username == "alice"


def test_refresh_unknown_token(service):
    with pytest.raises(NotFoundError):
        service.refresh("no-such-token")


def test_refresh_expired_token_is_deleted(service, alice, session):
    row = RefreshTokenFactory(owner=alice, expiry_date=utcnow() - timedelta(seconds=5))
    session.commit()
    token = row.token

    with pytest.raises(ExpiredError):
        service.refresh(token)
    assert service.tokens.find(token) is None


def test_logout_revokes_refresh_tokens(service, alice):
    granted = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))

    service.logout("alice")

    assert service.tokens.find(granted.refresh_token) is None
    with pytest.raises(NotFoundError):
        service.refresh(granted.refresh_token)


def test_logout_keeps_cached_access_validation(service, signer, alice):
    granted = service.login(LoginIn(username="alice", password=DEFAULT_PASSWORD))
    assert service.validate(granted.access_token).valid is True

    service.logout("alice")
    signer.revoke(granted.access_token)

    assert service.validate(granted.access_token).valid is True
    assert signer.verify_calls == 1


def test_logout_unknown_user(service):
    with pytest.raises(OwnerNotFoundError):
        service.logout("nobody")


def test_validate_unknown_token(service):
    result = service.validate("access.mallory.99")
    assert result.valid is False
    assert result.username is None
