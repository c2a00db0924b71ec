"""Serialization of cached token validations."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields, post_load

from shortlink.services._shared.ports.token_signer import ValidationResult


class ValidationResultSchema(Schema):
    """JSON shape of a :class:`ValidationResult` stored in Redis."""

    valid = fields.Boolean(required=True)
    username = fields.String(allow_none=True, load_default=None)

    @post_load
    def make_result(self, data: dict[str, Any], **_: Any) -> ValidationResult:
        return ValidationResult(**data)
