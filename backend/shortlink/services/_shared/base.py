from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from redis.exceptions import RedisError
from sqlalchemy.exc import SQLAlchemyError

from shortlink.core import errors as api_errors
from shortlink.core.config import CoreSettings, current_settings
from shortlink.repositories.base import Pagination
from shortlink.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    ExpiredError,
    InternalError,
    InvalidUrlError,
    NotFoundError,
    ServiceError,
)
from shortlink.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting request-scoped data (auth, request ids, etc.).

    :param actor_id: Authenticated owner identifier.
    :param request_id: Correlation id for logging/tracing.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Provide helpers to run read-only and read-write units of work.
    * Centralize error translation and logging.
    * Offer shared validation helpers (pagination, ownership).
    * Keep services thin, orchestration-only, no web/ORM leakage.

    Notes
    -----
    - Services must never touch the global session; always use a Unit of Work.
    - Tunables (code length, TTLs) come from :class:`CoreSettings`.
    """

    DEFAULT_READ_ISOLATION = "READ COMMITTED"

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        settings: CoreSettings | None = None,
    ) -> None:
        """
        Initialize the base service.

        :param ctx: Optional request-scoped context (auth, tracing).
        :type ctx: ServiceContext | None
        :param settings: Core tunables; read from the current app when omitted.
        :type settings: CoreSettings | None
        """
        self.ctx = ctx or ServiceContext()
        self.settings = settings or current_settings()

    # -------------------------- UoW helpers ---------------------------------

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        """
        Create a read-write Unit of Work.

        :returns: Read-write UoW instance.
        :rtype: SQLAlchemyUnitOfWork
        """
        return SQLAlchemyUnitOfWork()

    def ro_uow(
        self, *, isolation: str | None = None, enforce_db_readonly: bool = True
    ) -> SQLAlchemyReadOnlyUnitOfWork:
        """
        Create a read-only Unit of Work.

        :param isolation: Transaction isolation level (e.g. "READ COMMITTED").
        :type isolation: str | None
        :param enforce_db_readonly: Apply ``SET TRANSACTION READ ONLY`` when supported.
        :type enforce_db_readonly: bool
        :returns: Read-only UoW instance.
        :rtype: SQLAlchemyReadOnlyUnitOfWork
        """
        return SQLAlchemyReadOnlyUnitOfWork(
            isolation_level=isolation or self.DEFAULT_READ_ISOLATION,
            enforce_db_readonly=enforce_db_readonly,
        )

    # ----------------------- Validation utilities ---------------------------

    def ensure_pagination(self, *, page: int, limit: int) -> Pagination:
        """
        Build a Pagination value object with basic clamping.

        :param page: 1-based page number.
        :type page: int
        :param limit: Page size.
        :type limit: int
        :returns: Pagination instance.
        :rtype: Pagination
        """
        page = max(1, int(page))
        limit = max(1, int(limit))
        return Pagination(page=page, limit=limit)

    def ensure_owner(self, actor_id: int | None, owner_id: int, *, msg: str | None = None) -> None:
        """
        Ensure the acting owner is the resource owner.

        :param actor_id: Acting owner id.
        :param owner_id: Owner id stored on the resource.
        :param msg: Optional custom error message.
        :raises AuthorizationError: If actor is not the owner.
        """
        from shortlink.services._shared.policies.common import is_owner

        if not is_owner(actor_id=actor_id, owner_id=owner_id):
            raise AuthorizationError(msg or "You can only manage your own resources.")

    # -------------------------- Error handling ------------------------------

    @contextmanager
    def guard(self, operation: str) -> Iterator[None]:
        """
        Wrap unexpected storage/cache failures into :class:`InternalError`.

        Domain errors pass through untouched. Anything raised by SQLAlchemy
        or Redis is logged with its traceback and re-raised as a generic
        internal failure so the caller never sees driver details.

        :param operation: Name of the operation, used in logs and the error.
        :raises InternalError: On ``SQLAlchemyError`` or ``RedisError``.
        """
        try:
            yield
        except (SQLAlchemyError, RedisError) as exc:
            logger.error(
                "Internal failure",
                exc_info=True,
                extra={"operation": operation, "error_type": type(exc).__name__},
            )
            raise InternalError(operation) from exc

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, InvalidUrlError):
            # → 400 Bad Request
            return api_errors.APIError(message=str(exc), status_code=400, code="invalid_url")

        if isinstance(exc, NotFoundError):
            # → 404 Not Found (OwnerNotFoundError included)
            return api_errors.NotFound(str(exc))

        if isinstance(exc, ConflictError):
            # → 409 Conflict (AliasTakenError included)
            return api_errors.Conflict(str(exc))

        if isinstance(exc, ExpiredError):
            # → 410 Gone
            return api_errors.Gone(str(exc))

        if isinstance(exc, AuthorizationError):
            # → 403 Forbidden
            return api_errors.Forbidden(str(exc))

        if isinstance(exc, InternalError):
            # → 500, generic message only
            return api_errors.InternalServerError()

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
