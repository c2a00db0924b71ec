# tests/unit/core/test_errors.py
from __future__ import annotations

import pytest
from sqlalchemy.exc import IntegrityError

from shortlink.core.config import TestingConfig
from shortlink.factory import create_app
from shortlink.services._shared.base import BaseService
from shortlink.services._shared.errors import AliasTakenError, ExpiredError


class ProblemConfig(TestingConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "problem-secret-key-with-at-least-32-bytes"
    LOG_LEVEL = "WARNING"


@pytest.fixture(scope="module")
def client():
    """A separate app whose routes raise the errors under test."""
    app = create_app(ProblemConfig, instance_relative_config=False)

    @app.get("/expired")
    def expired():
        raise BaseService().translate_exceptions(ExpiredError("ShortLink", "abc123"))

    @app.get("/alias")
    def alias():
        raise BaseService().translate_exceptions(AliasTakenError())

    @app.get("/integrity")
    def integrity():
        raise IntegrityError("INSERT", {}, Exception("UNIQUE constraint failed: users.email"))

    @app.get("/boom")
    def boom():
        raise RuntimeError("secret internals")

    return app.test_client()


def test_api_error_becomes_problem_json(client):
    resp = client.get("/expired", headers={"X-Request-Id": "req-1"})

    assert resp.status_code == 410
    assert resp.mimetype == "application/problem+json"
    body = resp.get_json()
    assert body["code"] == "gone"
    assert body["status"] == 410
    assert body["title"] == "Gone"
    assert body["detail"] == "ShortLink has expired: abc123"
    assert body["instance"] == "/expired"
    assert body["request_id"] == "req-1"


def test_alias_taken_is_conflict(client):
    resp = client.get("/alias")
    assert resp.status_code == 409
    assert resp.get_json()["code"] == "conflict"


def test_integrity_error_does_not_leak_driver_message(client):
    resp = client.get("/integrity")
    body = resp.get_json()

    assert resp.status_code == 409
    assert body["detail"] == "Resource conflict"
    assert "users.email" not in resp.get_data(as_text=True)


def test_unknown_route(client):
    resp = client.get("/nope")
    assert resp.status_code == 404
    assert resp.get_json()["detail"] == "Route '/nope' not found"


def test_unexpected_exception_is_generic_500(client):
    resp = client.get("/boom")
    body = resp.get_json()

    assert resp.status_code == 500
    assert body["code"] == "internal_server_error"
    assert "secret internals" not in resp.get_data(as_text=True)
    assert body["request_id"]
