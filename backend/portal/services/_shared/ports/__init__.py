"""
portal.services._shared.ports
=============================

Collection of *ports* (hexagonal interfaces) that define the contracts
between the onboarding services and the outside world.

Modules
-------
- :mod:`portal_backend`:
    Defines :class:`~.PortalBackend`: the upstream REST service.

- :mod:`session_store`:
    Defines :class:`~.SessionStore`: the persisted ``user`` record.

- :mod:`notifier`:
    Defines :class:`~.Notifier`: user-facing toast notifications.

- :mod:`navigator`:
    Defines :class:`~.Navigator`: client-side navigation.

- :mod:`scheduler`:
    Defines :class:`~.Scheduler`: cancellable delayed callbacks.

- :mod:`payment_processor`:
    Defines :class:`~.PaymentProcessor`: the settlement capability.

Design Notes
------------
Concrete adapters (HTTP, Redis, threads, the simulated gateway) live under
``portal.infra``. The in-memory/stub implementations here back unit tests
and the no-Redis default.
"""

from __future__ import annotations

from .navigator import Navigator, RecordingNavigator
from .notifier import CollectingNotifier, LoggingNotifier, Notice, NoticeLevel, Notifier
from .payment_processor import PaymentProcessor, StubPaymentProcessor
from .portal_backend import PortalBackend, StubPortalBackend
from .scheduler import ManualScheduler, ManualTimer, Scheduler, TimerHandle
from .session_store import InMemorySessionStore, SessionStore

__all__ = [
    "CollectingNotifier",
    "InMemorySessionStore",
    "LoggingNotifier",
    "ManualScheduler",
    "ManualTimer",
    "Navigator",
    "Notice",
    "NoticeLevel",
    "Notifier",
    "PaymentProcessor",
    "PortalBackend",
    "RecordingNavigator",
    "Scheduler",
    "SessionStore",
    "StubPaymentProcessor",
    "StubPortalBackend",
    "TimerHandle",
]
