"""
SessionContext
==============

Explicit owner of the persisted session user. Readers (route guards, the
pending-status view) go through :meth:`SessionContext.read`; writers replace
the whole record. Listeners subscribed with :meth:`SessionContext.subscribe`
are told when the user's status changes.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from portal.services._shared.errors import SessionRequiredError
from portal.services._shared.ports import SessionStore
from portal.services.session.dto import SessionUser

log = logging.getLogger(__name__)

StatusListener = Callable[[SessionUser], None]


class SessionContext:
    """Read/write/clear access to the session user with status notifications."""

    def __init__(self, store: SessionStore) -> None:
        self.store = store
        self._listeners: list[StatusListener] = []
        self._lock = threading.Lock()

    def read(self) -> SessionUser | None:
        return self.store.read()

    def require_user(self) -> SessionUser:
        """
        Return the session user, failing when there is none.

        :raises SessionRequiredError: When nobody is logged in.
        """
        user = self.store.read()
        if user is None:
            raise SessionRequiredError()
        return user

    def write(self, user: SessionUser) -> None:
        """Replace the session user, notifying listeners when the status changed."""
        with self._lock:
            previous = self.store.read()
            self.store.write(user)
            listeners = list(self._listeners)
        if previous is None or previous.status != user.status:
            log.info("session.status_changed status=%s", user.status, extra={"emp_id": user.user_id})
            for listener in listeners:
                listener(user)

    def update_status(self, status: str, *, rejection_reason: str | None = None) -> SessionUser:
        """
        Replace the session user's status.

        :raises SessionRequiredError: When nobody is logged in.
        """
        user = self.require_user().with_status(status, rejection_reason=rejection_reason)
        self.write(user)
        return user

    def clear(self) -> None:
        """Log out: forget the session user."""
        self.store.clear()

    def subscribe(self, listener: StatusListener) -> Callable[[], None]:
        """
        Register ``listener`` for status changes.

        :returns: A callable that unsubscribes ``listener``; calling it twice is harmless.
        """
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe
