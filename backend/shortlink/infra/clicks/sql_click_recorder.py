from __future__ import annotations

import logging
from dataclasses import dataclass

from shortlink.services._shared.ports import ClickRecorder
from shortlink.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SQLClickRecorder(ClickRecorder):
    """
    Apply the increment synchronously in its own read-write unit of work.

    Uses the Flask-scoped session, so it needs an active app context.
    """

    def record(self, code: str) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            matched = uow.links.increment_clicks(code)
        if not matched:
            logger.warning("Click for unknown short code", extra={"short_code": code})
