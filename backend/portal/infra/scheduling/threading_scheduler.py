from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from portal.services._shared.ports import Scheduler

log = logging.getLogger(__name__)


class ThreadingScheduler(Scheduler):
    """
    :class:`Scheduler` backed by daemon :class:`threading.Timer` threads.

    Exceptions raised by a callback are logged; they never reach the timer
    thread's default hook.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(max(0.0, delay), self._run, args=(callback,))
        timer.daemon = True
        timer.start()
        return timer

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        try:
            callback()
        except Exception:
            log.exception("scheduler.callback_failed")
