"""Authentication result schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class AuthResultSchema(Schema):
    """Access/refresh token pair returned by register, login and refresh."""

    username = fields.String(required=True)
    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)
    refresh_expires_at = fields.AwareDateTime(required=True)
    token_type = fields.String(dump_default="Bearer")
