from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol


@dataclass(frozen=True, slots=True)
class ValidationResult:
    """
    Outcome of an access-token check.

    :ivar valid: Whether signature and expiry checks passed.
    :ivar username: Owner the token was issued to, when valid.
    """

    valid: bool
    username: str | None = None

    @classmethod
    def invalid(cls) -> ValidationResult:
        return cls(valid=False, username=None)


class TokenSigner(Protocol):
    """Port for signing and verifying access tokens."""

    def sign(self, username: str) -> str: ...

    def verify(self, token: str) -> ValidationResult: ...


class StubTokenSigner(TokenSigner):
    """Deterministic signer used in unit tests.

    Tokens are ``access.<username>.<seq>``. ``verify_calls`` counts every
    verification so tests can tell cache hits from misses.
    """

    def __init__(self) -> None:
        self._seq = 0
        self._issued: dict[str, str] = {}
        self._revoked: set[str] = set()
        self.verify_calls = 0

    def sign(self, username: str) -> str:
        self._seq += 1
        token = f"access.{username}.{self._seq}"
        self._issued[token] = username
        return token

    def revoke(self, token: str) -> None:
        self._revoked.add(token)

    def verify(self, token: str) -> ValidationResult:
        self.verify_calls += 1
        username = self._issued.get(token)
        if username is None or token in self._revoked:
            return ValidationResult.invalid()
        return ValidationResult(valid=True, username=username)
