"""Short link repository: lookups by code, owner listings and click counters."""

from __future__ import annotations

from typing import cast

from sqlalchemy import func, select, update

from shortlink.models.link import ShortLink
from shortlink.repositories.base import BaseRepository, Page, Pagination


class ShortLinkRepository(BaseRepository[ShortLink]):
    """Persistence-only repository for :class:`ShortLink`.

    ``code_exists`` deliberately ignores ``is_active``: a soft-deleted code is
    still taken. Every other read filters on active rows.
    """

    model = ShortLink

    def _sortable_fields(self):
        return {
            "created_at": ShortLink.created_at,
            "click_count": ShortLink.click_count,
            "expires_at": ShortLink.expires_at,
        }

    def _filterable_fields(self):
        return {
            "owner_id": ShortLink.owner_id,
            "short_code": ShortLink.short_code,
            "is_active": ShortLink.is_active,
        }

    # ---------------------------- Lookups ----------------------------

    def code_exists(self, code: str) -> bool:
        """Return ``True`` if any row, active or soft-deleted, holds ``code``."""
        stmt = select(ShortLink.id).where(ShortLink.short_code == code).limit(1)
        return self.session.execute(stmt).first() is not None

    def get_active_by_code(self, code: str) -> ShortLink | None:
        """Fetch the unique active row for ``code``."""
        stmt = select(ShortLink).where(
            ShortLink.short_code == code,
            ShortLink.is_active.is_(True),
        )
        return cast(ShortLink | None, self.session.execute(stmt).scalars().first())

    # ---------------------------- Owner views ----------------------------

    def page_active_for_owner(self, owner_id: int, *, page: int, limit: int) -> Page[ShortLink]:
        """Active links of ``owner_id``, newest first."""
        return self.paginate(
            Pagination(page=page, limit=limit, sort=["-created_at"]),
            filters={"owner_id": owner_id, "is_active": True},
            pk_desc=True,
        )

    def count_active_for_owner(self, owner_id: int) -> int:
        stmt = select(func.count(ShortLink.id)).where(
            ShortLink.owner_id == owner_id,
            ShortLink.is_active.is_(True),
        )
        return int(self.session.execute(stmt).scalar_one())

    def sum_clicks_for_owner(self, owner_id: int) -> int:
        """Aggregate clicks of the owner's active links in SQL (0 when none)."""
        stmt = select(func.coalesce(func.sum(ShortLink.click_count), 0)).where(
            ShortLink.owner_id == owner_id,
            ShortLink.is_active.is_(True),
        )
        return int(self.session.execute(stmt).scalar_one())

    def top_active_by_clicks(self, owner_id: int, *, limit: int = 5) -> list[ShortLink]:
        return self.list(
            filters={"owner_id": owner_id, "is_active": True},
            sort=["-click_count"],
            limit=limit,
        )

    # ---------------------------- Mutations ----------------------------

    def increment_clicks(self, code: str) -> int:
        """
        Add one click to ``code`` with a single ``UPDATE``.

        ``click_count = click_count + 1`` is evaluated by the database, so
        concurrent increments of the same row serialize on the row lock instead
        of overwriting each other.

        :returns: Number of rows matched (0 or 1).
        """
        stmt = (
            update(ShortLink)
            .where(ShortLink.short_code == code)
            .values(click_count=ShortLink.click_count + 1)
            .execution_options(synchronize_session=False)
        )
        result = self.session.execute(stmt)
        return int(result.rowcount or 0)

    def deactivate(self, link: ShortLink) -> ShortLink:
        """Soft-delete ``link`` and flush."""
        link.is_active = False
        self.flush()
        return link
