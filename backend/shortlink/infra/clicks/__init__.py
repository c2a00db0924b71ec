"""Click recorder adapters."""

from __future__ import annotations

from .sql_click_recorder import SQLClickRecorder
from .threaded_click_recorder import ThreadedClickRecorder

__all__ = ["SQLClickRecorder", "ThreadedClickRecorder"]
