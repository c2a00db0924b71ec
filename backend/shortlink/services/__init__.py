"""Service layer public API.

This package exposes the building blocks of the service layer so callers
can import from :mod:`shortlink.services` without knowing internal structure.

Re-exports
----------
- Base primitives (from ``shortlink.services._shared.base``)
    * :class:`BaseService`
    * :class:`ServiceContext`

- Link service (from ``shortlink.services.links``)
    * :class:`LinkService`
    * DTOs: :class:`CreateLinkIn`, :class:`LinkOut`, :class:`LinkPageOut`,
      :class:`LinkStatsOut`

- Refresh token service (from ``shortlink.services.tokens``)
    * :class:`RefreshTokenService`
    * DTO: :class:`RefreshTokenOut`

- Auth services (from ``shortlink.services.auth``)
    * :class:`AuthService`, :class:`TokenValidationService`
    * DTOs: :class:`RegisterIn`, :class:`LoginIn`, :class:`AuthOut`
"""

from __future__ import annotations

from shortlink.services._shared.base import BaseService, ServiceContext
from shortlink.services.auth.dto import AuthOut, LoginIn, RegisterIn
from shortlink.services.auth.service import AuthService
from shortlink.services.auth.validation import TokenValidationService
from shortlink.services.links.dto import CreateLinkIn, LinkOut, LinkPageOut, LinkStatsOut
from shortlink.services.links.service import LinkService
from shortlink.services.tokens.dto import RefreshTokenOut
from shortlink.services.tokens.service import RefreshTokenService

__all__ = [
    "BaseService",
    "ServiceContext",
    "AuthOut",
    "AuthService",
    "LoginIn",
    "RegisterIn",
    "TokenValidationService",
    "CreateLinkIn",
    "LinkOut",
    "LinkPageOut",
    "LinkService",
    "LinkStatsOut",
    "RefreshTokenOut",
    "RefreshTokenService",
]
