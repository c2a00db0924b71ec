"""Short link presentation schemas."""

from __future__ import annotations

from typing import Any

from marshmallow import Schema, fields

from .common import MetaSchema

DEFAULT_SHORT_URL_BASE = "http://localhost:8080"


def _configured_base() -> str:
    from flask import current_app, has_app_context

    if has_app_context():
        return str(current_app.config.get("SHORT_URL_BASE", DEFAULT_SHORT_URL_BASE))
    return DEFAULT_SHORT_URL_BASE


class LinkSchema(Schema):
    """
    Public representation of a short link.

    ``short_url`` is composed here from ``SHORT_URL_BASE``; the link service
    only knows codes.
    """

    def __init__(self, *, base_url: str | None = None, **kwargs: Any) -> None:
        self._base_url = (base_url or _configured_base()).rstrip("/")
        super().__init__(**kwargs)

    id = fields.Integer(dump_only=True)
    short_code = fields.String(dump_only=True)
    short_url = fields.Method("get_short_url", dump_only=True)
    original_url = fields.String(dump_only=True)
    owner_id = fields.Integer(dump_only=True)
    created_at = fields.AwareDateTime(dump_only=True)
    expires_at = fields.AwareDateTime(dump_only=True)
    click_count = fields.Integer(dump_only=True)
    is_active = fields.Boolean(dump_only=True)

    def get_short_url(self, obj: Any) -> str:
        return f"{self._base_url}/{obj.short_code}"


class LinkPageSchema(Schema):
    """One page of links plus its ``meta`` block."""

    items = fields.List(fields.Nested(LinkSchema), dump_only=True)
    meta = fields.Nested(MetaSchema, dump_only=True)


class LinkStatsSchema(Schema):
    """Owner aggregates: active count, total clicks and top links."""

    active_count = fields.Integer(dump_only=True)
    total_clicks = fields.Integer(dump_only=True)
    top_links = fields.List(fields.Nested(LinkSchema), dump_only=True)
