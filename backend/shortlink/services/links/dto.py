"""
DTOs for LinkService.

Framework-agnostic contracts between callers and the link service. Output
DTOs are immutable snapshots built by :func:`to_link_out`; callers never
receive ORM instances.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from shortlink.models.base import as_utc
from shortlink.models.link import ShortLink
from shortlink.services._shared.dto import PageMeta

# --------------------------------------------------------------------------- #
# Input DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class CreateLinkIn:
    """
    Input DTO for creating a short link.

    :param original_url: Absolute ``http``/``https`` URL to redirect to.
    :type original_url: str
    :param owner_id: Owning user identifier.
    :type owner_id: int
    :param custom_alias: Requested code; a generated one is used when omitted or blank.
    :type custom_alias: str | None
    :param expires_at: Absolute expiry; defaults to creation time plus the link TTL.
    :type expires_at: datetime | None
    """

    original_url: str
    owner_id: int
    custom_alias: str | None = None
    expires_at: datetime | None = None


# --------------------------------------------------------------------------- #
# Output DTOs
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class LinkOut:
    """
    Immutable view of a short link.

    :param id: Row identifier.
    :param short_code: Public code.
    :param original_url: Redirect target.
    :param owner_id: Owning user.
    :param created_at: Creation instant (UTC).
    :param expires_at: Absolute expiry (UTC).
    :param click_count: Successful resolutions so far.
    :param is_active: ``False`` once soft-deleted.
    """

    id: int
    short_code: str
    original_url: str
    owner_id: int
    created_at: datetime
    expires_at: datetime
    click_count: int
    is_active: bool


@dataclass(frozen=True, slots=True)
class LinkPageOut:
    """One page of an owner's active links, newest first."""

    items: tuple[LinkOut, ...]
    meta: PageMeta


@dataclass(frozen=True, slots=True)
class LinkStatsOut:
    """
    Aggregates over an owner's active links.

    :param active_count: Number of active links.
    :param total_clicks: Sum of their click counts.
    :param top_links: Up to five links with the most clicks, descending.
    """

    active_count: int
    total_clicks: int
    top_links: tuple[LinkOut, ...]


# --------------------------------------------------------------------------- #
# Converters
# --------------------------------------------------------------------------- #


def to_link_out(link: ShortLink) -> LinkOut:
    """Snapshot a :class:`ShortLink` row into a :class:`LinkOut`."""
    return LinkOut(
        id=link.id,
        short_code=link.short_code,
        original_url=link.original_url,
        owner_id=link.owner_id,
        created_at=as_utc(link.created_at),
        expires_at=as_utc(link.expires_at),
        click_count=int(link.click_count or 0),
        is_active=bool(link.is_active),
    )
