# tests/unit/core/test_logger.py
from __future__ import annotations

import json
import logging
import sys

from shortlink.core.logger import JSONFormatter, RequestIdFilter


def _record(msg="Short link created", **extra) -> logging.LogRecord:
    record = logging.LogRecord("shortlink.test", logging.INFO, __file__, 10, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_context():
    payload = json.loads(JSONFormatter().format(_record(short_code="abc123", owner_id=7)))

    assert payload["level"] == "INFO"
    assert payload["name"] == "shortlink.test"
    assert payload["message"] == "Short link created"
    assert payload["short_code"] == "abc123"
    assert payload["owner_id"] == 7
    assert payload["request_id"] is None


def test_json_formatter_renders_exceptions():
    try:
        raise RuntimeError("counter offline")
    except RuntimeError:
        record = _record("Click increment failed")
        record.exc_info = sys.exc_info()

    payload = json.loads(JSONFormatter().format(record))
    assert "RuntimeError: counter offline" in payload["exc_info"]


def test_json_formatter_stringifies_unknown_types():
    payload = json.loads(JSONFormatter().format(_record(ttl=object())))
    assert isinstance(payload["ttl"], str)


def test_request_id_filter_outside_requests():
    record = _record()
    assert RequestIdFilter().filter(record) is True
    assert record.request_id is None
