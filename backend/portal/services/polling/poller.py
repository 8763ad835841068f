"""
StatusPoller
============

Periodically asks the upstream service for a pending employer's review status.

Lifecycle
---------
``start(emp_id)`` schedules the first tick and returns the poller itself as
the subscription; ``stop()`` clears the pending timer. Both are owned by the
view that created the poller.

Guarantees
----------
- At most one status query is in flight per poller. The next tick is only
  scheduled after the current one finished, and a tick requested while
  another is running is skipped.
- ``on_approved`` fires exactly once, after the first ``approved`` result,
  and the poller stops itself.
- ``rejected`` stops polling and hands the account (with its reason) to
  ``on_rejected``; there is no navigation.
- Query failures and unknown statuses are logged and reported through
  ``on_error``; polling continues on the next interval.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from portal.services._shared.base import BaseService, ServiceContext
from portal.services._shared.errors import BackendError, FetchError, InvalidTransitionError
from portal.services._shared.ports import PortalBackend, Scheduler, TimerHandle
from portal.services.registration.dto import AccountStatus, EmployerAccount

log = logging.getLogger(__name__)

AccountCallback = Callable[[EmployerAccount], None]

DEFAULT_INTERVAL = 60.0


class StatusPoller(BaseService):
    """Cancellable polling task for one employer account."""

    def __init__(
        self,
        backend: PortalBackend,
        scheduler: Scheduler,
        *,
        on_approved: AccountCallback,
        on_rejected: AccountCallback,
        on_status: AccountCallback | None = None,
        on_error: Callable[[FetchError], None] | None = None,
        interval: float = DEFAULT_INTERVAL,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.backend = backend
        self.scheduler = scheduler
        self.interval = interval
        self._on_approved = on_approved
        self._on_rejected = on_rejected
        self._on_status = on_status
        self._on_error = on_error

        self.emp_id: int | str | None = None
        self.ticks = 0
        self.failures = 0

        self._lock = threading.Lock()
        self._in_flight = threading.Lock()
        self._handle: TimerHandle | None = None
        self._running = False
        self._finished = False

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self, emp_id: int | str) -> StatusPoller:
        """
        Begin polling ``emp_id`` every ``interval`` seconds.

        :returns: ``self``, to be kept as the subscription handle.
        :raises InvalidTransitionError: When the poller already ran.
        """
        with self._lock:
            if self._running or self._finished:
                raise InvalidTransitionError("Status poller already started")
            self.emp_id = emp_id
            self._running = True
            self._handle = self.scheduler.call_later(self.interval, self.tick)
        log.info("poller.started interval=%s", self.interval, extra=self.log_extra(emp_id=emp_id))
        return self

    def stop(self) -> None:
        """Stop polling and clear the pending timer. Safe to call repeatedly."""
        with self._lock:
            handle, self._handle = self._handle, None
            was_running = self._running
            self._running = False
            self._finished = True
        if handle is not None:
            handle.cancel()
        if was_running:
            log.info("poller.stopped ticks=%s", self.ticks, extra=self.log_extra(emp_id=self.emp_id))

    # ------------------------------------------------------------------ #
    # Ticks
    # ------------------------------------------------------------------ #

    def tick(self) -> None:
        """Run one status query, then schedule the next one unless stopped."""
        if not self._running:
            return
        if not self._in_flight.acquire(blocking=False):
            log.debug("poller.tick_skipped", extra=self.log_extra(emp_id=self.emp_id))
            return
        try:
            self._poll_once()
        finally:
            self._in_flight.release()

        with self._lock:
            if self._running:
                self._handle = self.scheduler.call_later(self.interval, self.tick)

    def _poll_once(self) -> None:
        self.ticks += 1
        try:
            data = self.backend.get_employer_status(self.emp_id)
            account = EmployerAccount.from_payload(data, default_status=AccountStatus.PENDING)
        except BackendError as exc:
            self._report(FetchError(exc.message or "Failed to check account status."))
            return
        except ValueError as exc:
            self._report(FetchError(f"Unexpected account status: {exc}"))
            return

        if not self._running:
            return
        if self._on_status is not None:
            self._on_status(account)

        if account.status is AccountStatus.APPROVED:
            if self._finish():
                log.info("poller.approved", extra=self.log_extra(emp_id=self.emp_id))
                self._on_approved(account)
        elif account.status is AccountStatus.REJECTED:
            if self._finish():
                log.info("poller.rejected", extra=self.log_extra(emp_id=self.emp_id))
                self._on_rejected(account)

    def _finish(self) -> bool:
        """Stop after a final status. ``True`` only for the caller that stopped it."""
        with self._lock:
            if not self._running:
                return False
            self._running = False
            self._finished = True
            handle, self._handle = self._handle, None
        if handle is not None:
            handle.cancel()
        return True

    def _report(self, error: FetchError) -> None:
        self.failures += 1
        log.warning(
            "poller.query_failed: %s",
            error.message,
            extra=self.log_extra(emp_id=self.emp_id, op="get-employer-status"),
        )
        if self._on_error is not None:
            self._on_error(error)
