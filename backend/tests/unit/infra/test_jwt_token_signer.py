# tests/unit/infra/test_jwt_token_signer.py
from __future__ import annotations

import pytest
from flask_jwt_extended import create_refresh_token
from freezegun import freeze_time

from shortlink.infra.jwt.flask_jwt_token_signer import JWTTokenSigner
from shortlink.services._shared.ports import ValidationResult


@pytest.fixture()
def signer() -> JWTTokenSigner:
    return JWTTokenSigner()


def test_sign_then_verify(signer):
    token = signer.sign("alice")
    assert signer.verify(token) == ValidationResult(valid=True, username="alice")


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_malformed_tokens_are_invalid(signer, token):
    assert signer.verify(token) == ValidationResult.invalid()


def test_tampered_token_is_invalid(signer):
    header, payload, signature = signer.sign("alice").split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    assert signer.verify(tampered).valid is False


def test_expired_token_is_invalid(signer, app):
    with freeze_time("2025-01-01 00:00:00"):
        token = signer.sign("alice")
    lifetime = app.config["JWT_ACCESS_TOKEN_EXPIRES"]
    with freeze_time("2025-01-01 00:00:00") as frozen:
        frozen.tick(lifetime.total_seconds() + 1)
        assert signer.verify(token).valid is False


def test_refresh_jwt_is_not_an_access_token(signer):
    assert signer.verify(create_refresh_token(identity="alice")).valid is False
