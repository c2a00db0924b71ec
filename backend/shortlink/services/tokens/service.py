"""
RefreshTokenService
===================

Server-side refresh tokens with a single live token per owner.

- ``issue`` rotates: lock owner, delete the owner's rows, flush, insert.
- ``verify`` deletes a token found expired and commits that deletion
  before reporting the expiry.
- Token strings are opaque UUID4 values and are never regenerated on use.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from uuid import uuid4

from sqlalchemy.exc import IntegrityError

from shortlink.models.base import utcnow
from shortlink.repositories.refresh_token import RefreshTokenRepository
from shortlink.services._shared.base import BaseService
from shortlink.services._shared.errors import (
    ExpiredError,
    NotFoundError,
    OwnerNotFoundError,
    violates,
)
from shortlink.services.tokens.dto import RefreshTokenOut, to_refresh_token_out

logger = logging.getLogger(__name__)

OWNER_CONSTRAINT = "uq_refresh_tokens_owner_id"


def mask_token(token: str) -> str:
    """Shorten a token for logs and error messages."""
    return f"{token[:8]}..." if len(token) > 8 else "***"


class RefreshTokenService(BaseService):
    """Issue, look up, verify and revoke refresh tokens."""

    # ------------------------------------------------------------------ #
    # Issue / rotate
    # ------------------------------------------------------------------ #

    def issue(self, owner_id: int, ttl: timedelta | None = None) -> RefreshTokenOut:
        """
        Replace every token of ``owner_id`` with a fresh one.

        The steps run in one transaction: lock the owner row, bulk-delete
        the owner's tokens and flush, then insert the new token. A rotation
        for the same owner that commits first makes our insert hit the
        per-owner unique constraint; the transaction is rolled back and the
        whole sequence retried, so the last writer wins.

        :param owner_id: Owning user.
        :param ttl: Lifetime; ``REFRESH_TOKEN_TTL_SECONDS`` when omitted.
        :returns: The new token.
        :raises OwnerNotFoundError: If ``owner_id`` has no user record.
        """
        lifetime = ttl if ttl is not None else self.settings.refresh_ttl
        with self.guard("issue_refresh_token"):
            while True:
                try:
                    return self._rotate(owner_id, lifetime)
                except IntegrityError as exc:
                    if not violates(exc, OWNER_CONSTRAINT):
                        raise
                    logger.info(
                        "Concurrent refresh token rotation; retrying",
                        extra={"owner_id": owner_id},
                    )

    def _rotate(self, owner_id: int, ttl: timedelta) -> RefreshTokenOut:
        with self.rw_uow() as uow:
            if uow.users.get_for_update(owner_id) is None:
                raise OwnerNotFoundError(owner_id)

            repo: RefreshTokenRepository = uow.refresh_tokens
            replaced = repo.delete_for_owner(owner_id)
            row = repo.model(
                token=str(uuid4()),
                owner_id=owner_id,
                expiry_date=utcnow() + ttl,
            )
            repo.add(row)
            logger.info(
                "Refresh token issued",
                extra={"owner_id": owner_id, "replaced": replaced},
            )
            return to_refresh_token_out(row)

    # ------------------------------------------------------------------ #
    # Lookups
    # ------------------------------------------------------------------ #

    def find(self, token: str) -> RefreshTokenOut | None:
        """Exact-match lookup; no side effects."""
        with self.guard("find_refresh_token"), self.ro_uow() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            return to_refresh_token_out(row) if row is not None else None

    def verify(self, token: str) -> RefreshTokenOut:
        """
        Return the token unchanged while it is unexpired.

        An expired token is deleted, and the deletion is committed before
        :class:`ExpiredError` is raised.

        :raises NotFoundError: If the token is unknown.
        :raises ExpiredError: If ``expiry_date`` has passed.
        """
        with self.guard("verify_refresh_token"), self.rw_uow() as uow:
            repo: RefreshTokenRepository = uow.refresh_tokens
            row = repo.get_by_token(token)
            if row is None:
                raise NotFoundError("RefreshToken", mask_token(token))
            expired = row.is_expired(utcnow())
            if expired:
                owner_id = row.owner_id
                repo.delete(row)
            else:
                result = to_refresh_token_out(row)

        if expired:
            logger.info("Expired refresh token removed", extra={"owner_id": owner_id})
            raise ExpiredError("RefreshToken", mask_token(token))
        return result

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_for_owner(self, owner_id: int) -> int:
        """Delete every token of ``owner_id``; returns how many were removed."""
        with self.guard("revoke_refresh_tokens"), self.rw_uow() as uow:
            removed = uow.refresh_tokens.delete_for_owner(owner_id)
        logger.info("Refresh tokens revoked", extra={"owner_id": owner_id, "removed": removed})
        return removed
