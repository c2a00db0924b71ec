"""Unit tests for UserRepository."""

import pytest

from shortlink.repositories.user import UserRepository
from tests.factories.user import UserFactory


class TestUserRepository:
    """Ensure ``UserRepository`` resolves owners and checks credentials."""

    @pytest.fixture()
    def repo(self):
        return UserRepository()

    def test_get_by_username(self, repo, session):
        """Fetch a user by username, ignoring surrounding whitespace."""
        u = UserFactory(username="alice")
        session.commit()

        fetched = repo.get_by_username("  alice ")
        assert fetched is not None
        assert fetched.id == u.id
        assert repo.get_by_username("nobody") is None

    def test_exists_by_username_or_email(self, repo, session):
        """Either a matching username or a matching email counts as taken."""
        UserFactory(username="bob", email="bob@example.com")
        session.commit()

        assert repo.exists_by_username_or_email("bob", "other@example.com")
        assert repo.exists_by_username_or_email("other", "BOB@example.com")
        assert not repo.exists_by_username_or_email("other", "other@example.com")

    def test_get_for_update_returns_row(self, repo, session):
        """SQLite ignores FOR UPDATE but the row still comes back."""
        u = UserFactory()
        session.commit()

        assert repo.get_for_update(u.id).id == u.id
        assert repo.get_for_update(u.id + 1000) is None

    def test_authenticate_valid_and_invalid(self, repo, session):
        """Authenticate with correct credentials and reject invalid attempts."""
        UserFactory(username="authuser", password="strongpass")
        session.commit()

        assert repo.authenticate("authuser", "strongpass") is not None
        assert repo.authenticate("authuser", "wrongpass") is None
        assert repo.authenticate("nope", "strongpass") is None
