"""Refresh token repository."""

from __future__ import annotations

from typing import cast

from sqlalchemy import delete, func, select

from shortlink.models.refresh_token import RefreshToken
from shortlink.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence-only repository for :class:`RefreshToken`."""

    model = RefreshToken

    def _filterable_fields(self):
        return {
            "owner_id": RefreshToken.owner_id,
            "token": RefreshToken.token,
        }

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def count_for_owner(self, owner_id: int) -> int:
        stmt = select(func.count(RefreshToken.id)).where(RefreshToken.owner_id == owner_id)
        return int(self.session.execute(stmt).scalar_one())

    def delete_for_owner(self, owner_id: int) -> int:
        """
        Bulk-delete every token of ``owner_id`` and flush.

        Issued as one ``DELETE`` statement so rows this session never loaded
        are removed too; the flush makes the deletion visible to the insert
        that follows in the same transaction.

        :returns: Number of rows deleted.
        """
        stmt = (
            delete(RefreshToken)
            .where(RefreshToken.owner_id == owner_id)
            .execution_options(synchronize_session="fetch")
        )
        result = self.session.execute(stmt)
        self.flush()
        return int(result.rowcount or 0)
