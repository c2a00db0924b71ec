"""Shared DTOs used across services."""

from __future__ import annotations

from dataclasses import dataclass

from shortlink.repositories.base import Page


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Output pagination metadata.

    :param page: Current page (1-based).
    :type page: int
    :param limit: Page size.
    :type limit: int
    :param total: Total rows available.
    :type total: int
    :param has_prev: Whether a previous page exists.
    :type has_prev: bool
    :param has_next: Whether a next page exists.
    :type has_next: bool
    """

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool

    @classmethod
    def from_page(cls, page: Page) -> PageMeta:
        total = page.total or 0
        return cls(
            page=page.page,
            limit=page.limit,
            total=total,
            has_prev=page.page > 1,
            has_next=page.page * page.limit < total,
        )
