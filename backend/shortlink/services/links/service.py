"""
LinkService
===========

Application service for short links:

- Create links with a custom alias or a generated code.
- Resolve a code to its original URL and count the click.
- List and aggregate an owner's active links.
- Soft-delete a link on behalf of its owner.

Notes
-----
- Codes are never reused: uniqueness covers soft-deleted rows too.
- Clicks are counted by a :class:`ClickRecorder` after the read transaction
  closes; its failures never fail a resolution.
- Read operations use ``ro_uow()``; write operations use ``rw_uow()``.
"""

from __future__ import annotations

import logging
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError

from shortlink.core.components import get_click_recorder
from shortlink.core.config import CoreSettings
from shortlink.models.base import utcnow
from shortlink.models.link import ORIGINAL_URL_MAX_LENGTH, SHORT_CODE_MAX_LENGTH
from shortlink.repositories.link import ShortLinkRepository
from shortlink.services._shared.base import BaseService, ServiceContext
from shortlink.services._shared.dto import PageMeta
from shortlink.services._shared.errors import (
    AliasTakenError,
    ExpiredError,
    InvalidUrlError,
    NotFoundError,
    OwnerNotFoundError,
    ServiceError,
    violates,
)
from shortlink.services._shared.ports import ClickRecorder
from shortlink.services.links.codes import iter_codes
from shortlink.services.links.dto import (
    CreateLinkIn,
    LinkOut,
    LinkPageOut,
    LinkStatsOut,
    to_link_out,
)

logger = logging.getLogger(__name__)

ALLOWED_SCHEMES = frozenset({"http", "https"})
SHORT_CODE_CONSTRAINT = "uq_short_links_short_code"
TOP_LINKS_LIMIT = 5


def validate_url(url: str) -> str:
    """
    Return ``url`` stripped, or raise when it is not an absolute http(s) URL.

    :raises InvalidUrlError: Wrong scheme, missing host or over-long value.
    """
    candidate = (url or "").strip()
    parts = urlparse(candidate)
    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidUrlError(url)
    if not parts.netloc:
        raise InvalidUrlError(url, "URL must include a host")
    if len(candidate) > ORIGINAL_URL_MAX_LENGTH:
        raise InvalidUrlError(url, f"URL exceeds {ORIGINAL_URL_MAX_LENGTH} characters")
    return candidate


def normalize_alias(alias: str | None) -> str | None:
    """Trim a custom alias; blank means "generate one"."""
    if alias is None:
        return None
    alias = alias.strip()
    if not alias:
        return None
    if len(alias) > SHORT_CODE_MAX_LENGTH:
        raise ServiceError(f"Custom alias must be at most {SHORT_CODE_MAX_LENGTH} characters")
    return alias


class LinkService(BaseService):
    """
    Application service for the ``ShortLink`` aggregate.

    :param clicks: Click recorder; the app's configured one when omitted.
    """

    def __init__(
        self,
        *,
        clicks: ClickRecorder | None = None,
        ctx: ServiceContext | None = None,
        settings: CoreSettings | None = None,
    ) -> None:
        super().__init__(ctx=ctx, settings=settings)
        self.clicks = clicks or get_click_recorder()

    # --------------------------------------------------------------------- #
    # Creation
    # --------------------------------------------------------------------- #

    def create_link(self, dto: CreateLinkIn) -> LinkOut:
        """
        Create a short link.

        With a custom alias, the alias is used verbatim unless any row, active
        or soft-deleted, already holds it. Without one, candidates are drawn
        until an unused code turns up. A unique violation at insert time means
        a concurrent writer took the code first: custom aliases then fail,
        generated codes are redrawn.

        :param dto: Creation parameters.
        :type dto: :class:`CreateLinkIn`
        :returns: The stored link.
        :rtype: :class:`LinkOut`
        :raises InvalidUrlError: If ``original_url`` is not absolute http(s).
        :raises AliasTakenError: If the custom alias already exists.
        :raises OwnerNotFoundError: If ``owner_id`` has no user record.
        """
        original_url = validate_url(dto.original_url)
        alias = normalize_alias(dto.custom_alias)

        with self.guard("create_link"):
            while True:
                try:
                    return self._insert_link(dto, original_url, alias)
                except IntegrityError as exc:
                    if not violates(exc, SHORT_CODE_CONSTRAINT):
                        raise
                    if alias is not None:
                        raise AliasTakenError() from exc
                    logger.info(
                        "Generated short code lost insert race; retrying",
                        extra={"owner_id": dto.owner_id},
                    )

    def _insert_link(self, dto: CreateLinkIn, original_url: str, alias: str | None) -> LinkOut:
        with self.rw_uow() as uow:
            if uow.users.get(dto.owner_id) is None:
                raise OwnerNotFoundError(dto.owner_id)

            repo: ShortLinkRepository = uow.links
            if alias is not None:
                if repo.code_exists(alias):
                    raise AliasTakenError()
                code = alias
            else:
                code = next(
                    candidate
                    for candidate in iter_codes(self.settings.code_length, self.settings.alphabet)
                    if not repo.code_exists(candidate)
                )

            now = utcnow()
            link = repo.model(
                original_url=original_url,
                short_code=code,
                owner_id=dto.owner_id,
                created_at=now,
                expires_at=dto.expires_at or now + self.settings.link_ttl,
                click_count=0,
                is_active=True,
            )
            repo.add(link)
            logger.info(
                "Short link created",
                extra={
                    "short_code": code,
                    "owner_id": dto.owner_id,
                    "custom_alias": alias is not None,
                },
            )
            return to_link_out(link)

    # --------------------------------------------------------------------- #
    # Resolution
    # --------------------------------------------------------------------- #

    def resolve(self, code: str) -> str:
        """
        Return the original URL for an active, unexpired ``code``.

        The click is handed to the recorder once the read has finished. A
        recorder failure is logged and swallowed.

        :raises NotFoundError: If no active link has this code.
        :raises ExpiredError: If the active link's expiry has passed.
        """
        now = utcnow()
        with self.guard("resolve"), self.ro_uow() as uow:
            link = uow.links.get_active_by_code(code)
            if link is None:
                raise NotFoundError("ShortLink", code)
            if link.is_expired(now):
                logger.warning("Expired short link requested", extra={"short_code": code})
                raise ExpiredError("ShortLink", code)
            original_url = link.original_url

        self._record_click(code)
        return original_url

    def _record_click(self, code: str) -> None:
        try:
            self.clicks.record(code)
        except Exception:
            logger.error("Click increment failed", exc_info=True, extra={"short_code": code})

    def get_link(self, code: str) -> LinkOut:
        """
        Fetch the active link for ``code`` without counting a click.

        :raises NotFoundError: If no active link has this code.
        """
        with self.guard("get_link"), self.ro_uow() as uow:
            link = uow.links.get_active_by_code(code)
            if link is None:
                raise NotFoundError("ShortLink", code)
            return to_link_out(link)

    # --------------------------------------------------------------------- #
    # Owner views
    # --------------------------------------------------------------------- #

    def list_for_owner(self, owner_id: int, page: int = 1, size: int = 20) -> LinkPageOut:
        """
        List the owner's active links, newest first.

        :param owner_id: Owning user.
        :param page: 1-based page number.
        :param size: Page size.
        """
        pagination = self.ensure_pagination(page=page, limit=size)
        with self.guard("list_for_owner"), self.ro_uow() as uow:
            result = uow.links.page_active_for_owner(
                owner_id, page=pagination.page, limit=pagination.limit
            )
            return LinkPageOut(
                items=tuple(to_link_out(link) for link in result.items),
                meta=PageMeta.from_page(result),
            )

    def stats_for_owner(self, owner_id: int) -> LinkStatsOut:
        """Active count, summed clicks and top five links by clicks."""
        with self.guard("stats_for_owner"), self.ro_uow() as uow:
            repo: ShortLinkRepository = uow.links
            return LinkStatsOut(
                active_count=repo.count_active_for_owner(owner_id),
                total_clicks=repo.sum_clicks_for_owner(owner_id),
                top_links=tuple(
                    to_link_out(link)
                    for link in repo.top_active_by_clicks(owner_id, limit=TOP_LINKS_LIMIT)
                ),
            )

    # --------------------------------------------------------------------- #
    # Deletion
    # --------------------------------------------------------------------- #

    def delete_link(self, code: str, owner_id: int) -> None:
        """
        Soft-delete the active link ``code`` owned by ``owner_id``.

        :raises NotFoundError: If no active link has this code.
        :raises AuthorizationError: If the link belongs to someone else.
        """
        with self.guard("delete_link"), self.rw_uow() as uow:
            repo: ShortLinkRepository = uow.links
            link = repo.get_active_by_code(code)
            if link is None:
                raise NotFoundError("ShortLink", code)
            self.ensure_owner(
                actor_id=owner_id,
                owner_id=link.owner_id,
                msg="You can only delete your own links.",
            )
            repo.deactivate(link)
            logger.info("Short link deleted", extra={"short_code": code, "owner_id": owner_id})
