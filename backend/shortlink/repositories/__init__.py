"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from shortlink.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    apply_sorting,
    paginate_select,
)
from shortlink.repositories.link import ShortLinkRepository
from shortlink.repositories.refresh_token import RefreshTokenRepository
from shortlink.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    "apply_sorting",
    # Domain
    "RefreshTokenRepository",
    "ShortLinkRepository",
    "UserRepository",
]
