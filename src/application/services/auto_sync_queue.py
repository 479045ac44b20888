"""Coalescing queue turning annotation change events into one sync per item."""

from __future__ import annotations

import logging
import threading

logger = logging.getLogger(__name__)


class AutoSyncQueue:
    """
    Accumulates change events per top-level item for a fixed window.

    The first event for an item opens its window; further events inside the
    window are merged into it. Once the window has elapsed the item is handed
    out exactly once by `pop_due`. Times are plain floats (e.g. time.monotonic()).
    """

    def __init__(self, debounce_seconds: float = 2.0) -> None:
        if debounce_seconds < 0:
            raise ValueError(f"debounce_seconds must be >= 0, got {debounce_seconds}")
        self.debounce_seconds = debounce_seconds
        self._deadlines: dict[str, float] = {}
        self._lock = threading.Lock()

    def record_change(self, item_key: str, at: float) -> None:
        with self._lock:
            if item_key in self._deadlines:
                return
            self._deadlines[item_key] = at + self.debounce_seconds
        logger.debug(f"Queued auto-sync for item {item_key}", extra={"item_key": item_key})

    def pop_due(self, now: float) -> list[str]:
        """Remove and return the items whose window has elapsed, oldest first."""
        with self._lock:
            due = [key for key, deadline in self._deadlines.items() if deadline <= now]
            for key in due:
                del self._deadlines[key]
        return due

    def pending(self) -> list[str]:
        with self._lock:
            return list(self._deadlines)

    def __len__(self) -> int:
        with self._lock:
            return len(self._deadlines)
