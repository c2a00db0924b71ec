# shortlink/infra/redis/redis_validation_cache.py
from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from datetime import timedelta

import redis  # type: ignore[import-untyped]
from marshmallow import ValidationError

from shortlink.schemas.validation import ValidationResultSchema
from shortlink.services._shared.ports import ValidationCache, ValidationResult

logger = logging.getLogger(__name__)

KEY_PREFIX = "tv:"


@dataclass(slots=True)
class RedisValidationCache(ValidationCache):
    """
    Redis-backed validation cache.

    Each entry is one string key ``tv:<key>`` holding the JSON form of a
    :class:`ValidationResult`, written with ``SET ... EX`` so Redis expires
    it. Owner-scoped keys built by ``owner_key`` land in ``tv:owner:<owner>``.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis
    schema: ValidationResultSchema = field(default_factory=ValidationResultSchema)

    # -------------------- helpers --------------------

    @staticmethod
    def _k(key: str) -> str:
        return f"{KEY_PREFIX}{key}"

    # -------------------- API ------------------------

    def get(self, key: str) -> ValidationResult | None:
        raw = self.r.get(self._k(key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        try:
            return self.schema.loads(raw)
        except (ValidationError, json.JSONDecodeError):
            # Unreadable entries are dropped and treated as a miss.
            logger.warning("Discarding malformed validation cache entry", extra={"key": key})
            self.r.delete(self._k(key))
            return None

    def put(self, key: str, result: ValidationResult, ttl: timedelta) -> None:
        seconds = max(1, int(ttl.total_seconds()))
        self.r.set(self._k(key), self.schema.dumps(result), ex=seconds)

    def evict(self, key: str) -> bool:
        return bool(self.r.delete(self._k(key)))
