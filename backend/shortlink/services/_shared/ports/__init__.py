"""
shortlink.services._shared.ports
================================

*Ports* (hexagonal interfaces) the services depend on, with in-memory
implementations for tests.

Modules
-------
- :mod:`token_signer`:
    :class:`~.TokenSigner` signs and verifies access tokens;
    :class:`~.ValidationResult` is the verification outcome.

- :mod:`validation_cache`:
    :class:`~.ValidationCache` stores positive validations with a TTL.

- :mod:`click_recorder`:
    :class:`~.ClickRecorder` counts redirects off the request path.

Concrete adapters (Redis, flask-jwt-extended, thread pool) live under
``shortlink.infra``.
"""

from __future__ import annotations

from .click_recorder import ClickRecorder, InMemoryClickRecorder
from .token_signer import StubTokenSigner, TokenSigner, ValidationResult
from .validation_cache import (
    InMemoryValidationCache,
    ValidationCache,
    owner_key,
)

__all__ = [
    "ClickRecorder",
    "InMemoryClickRecorder",
    "InMemoryValidationCache",
    "StubTokenSigner",
    "TokenSigner",
    "ValidationCache",
    "ValidationResult",
    "owner_key",
]
