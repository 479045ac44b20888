from __future__ import annotations

import threading


class CancellationToken:
    """Thread-safe flag checked between batch iterations."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
