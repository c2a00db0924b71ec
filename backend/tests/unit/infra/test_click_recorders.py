# tests/unit/infra/test_click_recorders.py
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future

import pytest

from shortlink.infra.clicks import SQLClickRecorder, ThreadedClickRecorder
from shortlink.models.link import ShortLink
from tests.factories.link import ShortLinkFactory


class InlineExecutor(Executor):
    """Runs submitted jobs immediately on the calling thread."""

    def __init__(self) -> None:
        self.shutdown_calls = 0

    def submit(self, fn, /, *args, **kwargs):
        future: Future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)
        return future

    def shutdown(self, wait=True, *, cancel_futures=False):
        self.shutdown_calls += 1


class ExplodingRecorder:
    def record(self, code: str) -> None:
        raise RuntimeError("disk full")


def _clicks(session, link_id: int) -> int:
    session.expire_all()
    return session.get(ShortLink, link_id).click_count


def test_sql_recorder_increments(session):
    link = ShortLinkFactory(short_code="sql1", click_count=4)
    link_id = link.id

    SQLClickRecorder().record("sql1")
    SQLClickRecorder().record("sql1")

    assert _clicks(session, link_id) == 6


def test_sql_recorder_unknown_code_warns(session, caplog):
    with caplog.at_level(logging.WARNING):
        SQLClickRecorder().record("missing")
    assert any(r.message == "Click for unknown short code" for r in caplog.records)


def test_threaded_recorder_runs_job_in_app_context(app, session):
    link = ShortLinkFactory(short_code="thr1")
    link_id = link.id
    recorder = ThreadedClickRecorder(app, executor=InlineExecutor())

    recorder.record("thr1")

    # The job's app context tore down the scoped session; read through a new one.
    assert _clicks(session, link_id) == 1


def test_threaded_recorder_logs_failures(app, caplog):
    recorder = ThreadedClickRecorder(app, executor=InlineExecutor())
    recorder._sql = ExplodingRecorder()

    with caplog.at_level(logging.ERROR):
        recorder.record("thr2")

    record = next(r for r in caplog.records if r.message == "Click increment failed")
    assert record.short_code == "thr2"
    assert record.exc_info[0] is RuntimeError


def test_threaded_recorder_logs_cancellation(caplog):
    future: Future = Future()
    future.cancel()

    with caplog.at_level(logging.WARNING):
        ThreadedClickRecorder._log_failure(future, "thr3")

    assert any(r.message == "Click increment cancelled" for r in caplog.records)


def test_shutdown_only_stops_owned_pool(app):
    external = InlineExecutor()
    ThreadedClickRecorder(app, executor=external).shutdown()
    assert external.shutdown_calls == 0

    owned = ThreadedClickRecorder(app, max_workers=1)
    owned.shutdown()
    with pytest.raises(RuntimeError):
        owned.record("late")
