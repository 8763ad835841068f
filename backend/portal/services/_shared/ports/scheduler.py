from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol


class TimerHandle(Protocol):
    """Handle returned by :meth:`Scheduler.call_later`. ``cancel`` is idempotent."""

    def cancel(self) -> None: ...


class Scheduler(Protocol):
    """Port for one-shot delayed callbacks."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle: ...


@dataclass(slots=True)
class ManualTimer(TimerHandle):
    due: float
    callback: Callable[[], None]
    cancelled: bool = False
    fired: bool = False

    def cancel(self) -> None:
        self.cancelled = True


@dataclass(slots=True)
class ManualScheduler(Scheduler):
    """
    Deterministic scheduler used in unit tests.

    Time only moves when :meth:`advance` is called; due callbacks run in due
    order on the caller's thread.
    """

    now: float = 0.0
    timers: list[ManualTimer] = field(default_factory=list)

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(due=self.now + max(0.0, delay), callback=callback)
        self.timers.append(timer)
        return timer

    def pending(self) -> list[ManualTimer]:
        return [t for t in self.timers if not (t.cancelled or t.fired)]

    def advance(self, seconds: float = 0.0) -> int:
        """Move the clock forward and fire every due timer. Returns how many fired."""
        target = self.now + seconds
        fired = 0
        while True:
            due = sorted(
                (t for t in self.pending() if t.due <= target), key=lambda t: t.due
            )
            if not due:
                break
            timer = due[0]
            self.now = max(self.now, timer.due)
            timer.fired = True
            timer.callback()
            fired += 1
        self.now = target
        return fired
