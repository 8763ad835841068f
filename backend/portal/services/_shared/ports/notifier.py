from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Literal, Protocol

NoticeLevel = Literal["info", "success", "warning", "error"]


@dataclass(frozen=True, slots=True)
class Notice:
    """A non-blocking, user-facing notification (toast)."""

    level: NoticeLevel
    message: str


class Notifier(Protocol):
    """Port for user-facing notifications."""

    def notify(self, level: NoticeLevel, message: str) -> None: ...


class CollectingNotifier(Notifier):
    """Keeps notices until the UI drains them, optionally forwarding each one."""

    def __init__(self, forward: Notifier | None = None) -> None:
        self._notices: list[Notice] = []
        self._forward = forward
        self._lock = threading.Lock()

    def notify(self, level: NoticeLevel, message: str) -> None:
        with self._lock:
            self._notices.append(Notice(level=level, message=message))
        if self._forward is not None:
            self._forward.notify(level, message)

    @property
    def notices(self) -> list[Notice]:
        with self._lock:
            return list(self._notices)

    def drain(self) -> list[Notice]:
        """Return and forget every pending notice."""
        with self._lock:
            notices, self._notices = self._notices, []
            return notices


_LEVELS: dict[str, int] = {
    "info": logging.INFO,
    "success": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LoggingNotifier(Notifier):
    """Writes notices to a logger."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or logging.getLogger("portal.notices")

    def notify(self, level: NoticeLevel, message: str) -> None:
        self._log.log(_LEVELS.get(level, logging.INFO), "notice.%s: %s", level, message)
