"""User repository: owner resolution and credential checks."""

from __future__ import annotations

from typing import cast

from sqlalchemy import or_, select

from shortlink.models.user import User
from shortlink.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never issues tokens; it only resolves owners and checks passwords.
    """

    model = User

    def _filterable_fields(self):
        return {
            "email": User.email,
            "username": User.username,
        }

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by username (surrounding whitespace ignored).

        :param username: Handle to search.
        :returns: User instance or ``None`` when not found.
        """
        stmt = select(User).where(User.username == username.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_username_or_email(self, username: str, email: str) -> bool:
        stmt = select(User.id).where(
            or_(User.username == username.strip(), User.email == email.strip().lower())
        )
        return self.session.execute(stmt).first() is not None

    def authenticate(self, username: str, password: str) -> User | None:
        """Return the user when ``password`` matches, else ``None``."""
        user = self.get_by_username(username)
        if not user or not user.verify_password(password):
            return None
        return user
