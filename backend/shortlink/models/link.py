"""Short link model: a public code mapped to an original URL."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from shortlink.core.extensions import db

from .base import PKMixin, ReprMixin, as_utc, utcnow

if TYPE_CHECKING:
    from .user import User

SHORT_CODE_MAX_LENGTH = 20
ORIGINAL_URL_MAX_LENGTH = 2048


class ShortLink(PKMixin, ReprMixin, db.Model):
    """
    Persisted short link.

    Fields
    ------
    original_url : str
        Absolute http(s) URL the code redirects to.
    short_code : str
        Public identifier. Unique across every row ever written, soft-deleted
        rows included, so a code is never handed out twice.
    owner_id : int
        Owning user.
    created_at, expires_at : datetime
        Creation instant and absolute expiry (always set).
    click_count : int
        Successful resolutions. Only ever incremented in SQL.
    is_active : bool
        ``False`` marks a soft delete.
    """

    __tablename__ = "short_links"

    original_url: Mapped[str] = mapped_column(String(ORIGINAL_URL_MAX_LENGTH), nullable=False)
    short_code: Mapped[str] = mapped_column(String(SHORT_CODE_MAX_LENGTH), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    click_count: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), nullable=False, default=0
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    owner: Mapped[User] = relationship(back_populates="links", lazy="select")

    __table_args__ = (
        UniqueConstraint("short_code", name="uq_short_links_short_code"),
        CheckConstraint("click_count >= 0", name="click_count_non_negative"),
        Index("ix_short_links_owner_active_created", "owner_id", "is_active", "created_at"),
    )

    def is_expired(self, now: datetime) -> bool:
        """Return ``True`` when ``expires_at`` lies strictly before ``now``."""
        return as_utc(self.expires_at) < as_utc(now)
