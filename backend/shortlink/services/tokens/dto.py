"""DTOs for RefreshTokenService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from shortlink.models.base import as_utc
from shortlink.models.refresh_token import RefreshToken


@dataclass(frozen=True, slots=True)
class RefreshTokenOut:
    """
    Immutable view of a refresh token.

    :param id: Row identifier.
    :type id: int
    :param token: Opaque token value.
    :type token: str
    :param owner_id: Owning user.
    :type owner_id: int
    :param expiry_date: Absolute expiry (UTC).
    :type expiry_date: datetime
    """

    id: int
    token: str
    owner_id: int
    expiry_date: datetime

    def is_expired(self, now: datetime) -> bool:
        return self.expiry_date < as_utc(now)


def to_refresh_token_out(row: RefreshToken) -> RefreshTokenOut:
    """Snapshot a :class:`RefreshToken` row into a :class:`RefreshTokenOut`."""
    return RefreshTokenOut(
        id=row.id,
        token=row.token,
        owner_id=row.owner_id,
        expiry_date=as_utc(row.expiry_date),
    )
