"""Refresh token model: one live opaque credential per owner."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortlink.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc

if TYPE_CHECKING:
    from .user import User


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Server-side refresh credential.

    The unique constraint on ``owner_id`` backs the single-live-token rule:
    issuing deletes the owner's rows and flushes before inserting, and a
    concurrent issuer that loses the race hits ``uq_refresh_tokens_owner_id``.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(64), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expiry_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    owner: Mapped[User] = relationship(back_populates="refresh_tokens", lazy="select")

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        UniqueConstraint("owner_id", name="uq_refresh_tokens_owner_id"),
    )

    def is_expired(self, now: datetime) -> bool:
        return as_utc(self.expiry_date) < as_utc(now)
