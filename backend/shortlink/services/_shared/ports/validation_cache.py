from __future__ import annotations

import threading
import time
from collections.abc import Callable
from datetime import timedelta
from typing import Protocol

from shortlink.services._shared.ports.token_signer import ValidationResult

OWNER_NAMESPACE = "owner:"


def owner_key(owner: str) -> str:
    """Return the cache key for entries grouped under an owner."""
    return f"{OWNER_NAMESPACE}{owner}"


class ValidationCache(Protocol):
    """
    Key/value store for positive token validations with a per-entry TTL.

    Keys are opaque strings. Token validations use the raw token as key;
    owner-scoped entries use :func:`owner_key`.
    """

    def get(self, key: str) -> ValidationResult | None: ...

    def put(self, key: str, result: ValidationResult, ttl: timedelta) -> None: ...

    def evict(self, key: str) -> bool: ...


class InMemoryValidationCache(ValidationCache):
    """
    Thread-safe in-process cache; expiry measured on a monotonic clock.

    Expired entries are swept on write at most once per ``sweep_interval``
    seconds. When ``max_entries`` is reached the least recently written
    entry is dropped.
    """

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        *,
        max_entries: int = 100_000,
        sweep_interval: float = 60.0,
    ) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self._clock = clock
        self._lock = threading.Lock()
        self._max_entries = max_entries
        self._sweep_interval = sweep_interval
        self._next_sweep = clock() + sweep_interval
        # Insertion order tracks write recency; ``put`` pops before re-inserting.
        self._entries: dict[str, tuple[ValidationResult, float]] = {}

    def get(self, key: str) -> ValidationResult | None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            result, deadline = entry
            if self._clock() >= deadline:
                del self._entries[key]
                return None
            return result

    def put(self, key: str, result: ValidationResult, ttl: timedelta) -> None:
        with self._lock:
            now = self._clock()
            if now >= self._next_sweep:
                self._sweep(now)
            self._entries.pop(key, None)
            while len(self._entries) >= self._max_entries:
                del self._entries[next(iter(self._entries))]
            self._entries[key] = (result, now + ttl.total_seconds())

    def evict(self, key: str) -> bool:
        with self._lock:
            return self._entries.pop(key, None) is not None

    def _sweep(self, now: float) -> None:
        expired = [key for key, (_, deadline) in self._entries.items() if now >= deadline]
        for key in expired:
            del self._entries[key]
        self._next_sweep = now + self._sweep_interval

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
