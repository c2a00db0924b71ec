"""Convenience exports for presentation and cache schemas."""

from __future__ import annotations

from .auth import AuthResultSchema
from .common import MetaSchema
from .link import LinkPageSchema, LinkSchema, LinkStatsSchema
from .validation import ValidationResultSchema

__all__ = [
    "AuthResultSchema",
    "MetaSchema",
    "LinkSchema",
    "LinkPageSchema",
    "LinkStatsSchema",
    "ValidationResultSchema",
]
