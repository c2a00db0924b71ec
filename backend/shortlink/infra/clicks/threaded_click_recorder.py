# shortlink/infra/clicks/threaded_click_recorder.py
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from flask import Flask

from shortlink.infra.clicks.sql_click_recorder import SQLClickRecorder
from shortlink.services._shared.ports import ClickRecorder

logger = logging.getLogger(__name__)


class ThreadedClickRecorder(ClickRecorder):
    """
    Off-request click recorder backed by an executor.

    ``record`` returns as soon as the job is queued. Each job pushes a fresh
    app context, so it gets its own scoped session and transaction. Failures
    are logged from the future's callback and never reach the caller.

    :param app: Application whose config and database the jobs use.
    :param executor: Executor to submit to; a thread pool is created when omitted.
    :param max_workers: Pool size when the pool is created here.
    """

    def __init__(
        self,
        app: Flask,
        *,
        executor: Executor | None = None,
        max_workers: int = 4,
    ) -> None:
        self._app = app
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="click-recorder"
        )
        self._sql = SQLClickRecorder()

    def record(self, code: str) -> None:
        future = self._executor.submit(self._run, code)
        future.add_done_callback(lambda f: self._log_failure(f, code))

    def shutdown(self, wait: bool = True) -> None:
        """Stop the pool (only when this recorder created it)."""
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    # -------------------- internals --------------------

    def _run(self, code: str) -> None:
        with self._app.app_context():
            self._sql.record(code)

    @staticmethod
    def _log_failure(future: Future, code: str) -> None:
        if future.cancelled():
            logger.warning("Click increment cancelled", extra={"short_code": code})
            return
        exc = future.exception()
        if exc is not None:
            logger.error(
                "Click increment failed",
                exc_info=(type(exc), exc, exc.__traceback__),
                extra={"short_code": code},
            )
