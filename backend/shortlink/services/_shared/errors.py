"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic**: they never depend on Flask or
HTTP. They are the stable contract between repositories, services and
whatever host exposes them. Translation to RFC 7807 responses lives in
``BaseService.translate_exceptions``.
"""

from __future__ import annotations

from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    PostgreSQL includes the constraint name in the message. SQLite reports
    ``UNIQUE constraint failed: <table>.<column>`` instead, so the
    ``uq_<table>_<column>`` naming convention is matched against that too.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_users_email').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    if name.startswith("uq_") and "unique constraint failed" in message:
        for failed in message.split(":", 1)[-1].split(","):
            table_column = failed.strip().replace(".", "_")
            if table_column and name == f"uq_{table_column}":
                return True
    return False


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from repositories or domain logic.
    - Every subclass is recoverable and safe to show to a caller.
    """

    pass


# --------------------------------------------------------------------------- #
# Specific domain-level errors
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class NotFoundError(ServiceError):
    """
    Raised when no active record exists for a key.

    :param entity: Entity name (e.g., "ShortLink").
    :param key: Identifier or search key.
    """

    entity: str
    key: str | int

    def __str__(self) -> str:
        return f"{self.entity} not found: {self.key}"


class OwnerNotFoundError(NotFoundError):
    """Raised when an owner id or username has no backing user record."""

    def __init__(self, key: str | int) -> None:
        NotFoundError.__init__(self, "User", key)

    def __str__(self) -> str:
        return f"Owner not found: {self.key}"


@dataclass(slots=True)
class ConflictError(ServiceError):
    """
    Raised when a unique constraint or business rule conflict occurs.

    :param entity: Entity name (e.g., "User").
    :param detail: Short human-readable explanation.
    """

    entity: str
    detail: str

    def __str__(self) -> str:
        return f"Conflict on {self.entity}: {self.detail}"


@dataclass(slots=True)
class AliasTakenError(ConflictError):
    """Raised when a requested custom code already exists, active or not."""

    entity: str = "ShortLink"
    detail: str = "custom alias already exists"


@dataclass(slots=True)
class ExpiredError(ServiceError):
    """
    Raised when a record exists but its expiry has passed.

    Kept distinct from :class:`NotFoundError` so a redirect can tell a dead
    link from an unknown one.
    """

    entity: str
    key: str

    def __str__(self) -> str:
        return f"{self.entity} has expired: {self.key}"


class InvalidUrlError(ServiceError):
    """Raised when a URL is not an absolute ``http``/``https`` URI."""

    def __init__(self, url: str, reason: str = "URL must start with http:// or https://") -> None:
        super().__init__(f"Invalid URL {url!r}: {reason}")
        self.url = url
        self.reason = reason


class AuthorizationError(ServiceError):
    """Raised when the acting owner does not own the target resource."""


class InternalError(ServiceError):
    """
    Wraps an unexpected lower-layer failure (database, cache, serialization).

    The message is generic on purpose; the original exception is chained as
    ``__cause__`` and logged where it is wrapped.
    """

    def __init__(self, operation: str) -> None:
        super().__init__(f"Internal failure during {operation}")
        self.operation = operation
