from __future__ import annotations

import threading
from typing import Protocol


class Navigator(Protocol):
    """Port for client-side navigation. ``current`` is the last route navigated to."""

    def navigate(self, route: str) -> None: ...

    @property
    def current(self) -> str | None: ...


class RecordingNavigator(Navigator):
    """Remembers every navigation; the UI reads :attr:`current`."""

    def __init__(self, start: str | None = None) -> None:
        self.history: list[str] = []
        self._start = start
        self._lock = threading.Lock()

    def navigate(self, route: str) -> None:
        with self._lock:
            self.history.append(route)

    @property
    def current(self) -> str | None:
        with self._lock:
            return self.history[-1] if self.history else self._start
