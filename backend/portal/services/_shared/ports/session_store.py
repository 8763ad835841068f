from __future__ import annotations

import threading
from typing import Protocol

from portal.services.session.dto import SessionUser


class SessionStore(Protocol):
    """
    Persisted ``user`` record for one client session.

    The record is a single-owner, replace-whole-value resource: writers
    always store a complete :class:`SessionUser`.
    """

    def read(self) -> SessionUser | None: ...

    def write(self, user: SessionUser) -> None: ...

    def clear(self) -> None: ...


class InMemorySessionStore(SessionStore):
    """Process-local session store (default when Redis is not configured)."""

    def __init__(self, user: SessionUser | None = None) -> None:
        self._user = user
        self._lock = threading.Lock()

    def read(self) -> SessionUser | None:
        with self._lock:
            return self._user

    def write(self, user: SessionUser) -> None:
        with self._lock:
            self._user = user

    def clear(self) -> None:
        with self._lock:
            self._user = None
