from __future__ import annotations

import threading
from typing import Protocol


class ClickRecorder(Protocol):
    """
    Port for counting a successful redirect.

    Implementations must apply the increment as a single atomic
    ``click_count = click_count + 1`` statement and may run it later or on
    another thread. ``record`` must not block on the increment.
    """

    def record(self, code: str) -> None: ...


class InMemoryClickRecorder(ClickRecorder):
    """Collects recorded codes without touching storage."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self.recorded: list[str] = []

    def record(self, code: str) -> None:
        with self._lock:
            self.recorded.append(code)
