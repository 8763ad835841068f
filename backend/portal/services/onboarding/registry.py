"""
FlowRegistry
============

Owns the live onboarding flows of this process, keyed by flow id. Each flow
gets its own notifier and navigator so the HTTP layer can return the toasts
and route produced by one request. Flows sharing a ``session_id`` share the
persisted session user.
"""

from __future__ import annotations

import logging
import threading
import uuid
from collections.abc import Callable
from dataclasses import dataclass

from portal import routes
from portal.services._shared.errors import FlowNotFoundError
from portal.services._shared.ports import (
    CollectingNotifier,
    LoggingNotifier,
    PaymentProcessor,
    PortalBackend,
    RecordingNavigator,
    Scheduler,
    SessionStore,
)
from portal.services.onboarding.dto import FlowSnapshot
from portal.services.onboarding.flow import DEFAULT_SUPPORT_EMAIL, OnboardingFlow
from portal.services.session.service import SessionContext

log = logging.getLogger(__name__)

SessionStoreFactory = Callable[[str], SessionStore]


@dataclass(slots=True)
class FlowEntry:
    flow: OnboardingFlow
    notifier: CollectingNotifier
    session_id: str

    @property
    def flow_id(self) -> str:
        return self.flow.flow_id

    def snapshot(self) -> FlowSnapshot:
        """Snapshot the flow, draining the notices raised since the last one."""
        return self.flow.snapshot(notices=self.notifier.drain())


class FlowRegistry:
    """Creates, looks up and tears down onboarding flows."""

    def __init__(
        self,
        *,
        backend: PortalBackend,
        scheduler: Scheduler,
        processor: PaymentProcessor,
        session_store_factory: SessionStoreFactory,
        poll_interval: float,
        redirect_delay: float,
        support_email: str = DEFAULT_SUPPORT_EMAIL,
    ) -> None:
        self.backend = backend
        self.scheduler = scheduler
        self.processor = processor
        self.session_store_factory = session_store_factory
        self.poll_interval = poll_interval
        self.redirect_delay = redirect_delay
        self.support_email = support_email
        self._flows: dict[str, FlowEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._flows)

    def create(self, *, session_id: str | None = None) -> FlowEntry:
        """Start a new flow, optionally bound to an existing client session."""
        flow_id = uuid.uuid4().hex
        session_id = session_id or uuid.uuid4().hex
        notifier = CollectingNotifier(forward=LoggingNotifier())
        flow = OnboardingFlow(
            flow_id=flow_id,
            backend=self.backend,
            session=SessionContext(self.session_store_factory(session_id)),
            notifier=notifier,
            navigator=RecordingNavigator(start=routes.EMPLOYER_REGISTER),
            scheduler=self.scheduler,
            processor=self.processor,
            poll_interval=self.poll_interval,
            redirect_delay=self.redirect_delay,
            support_email=self.support_email,
        )
        entry = FlowEntry(flow=flow, notifier=notifier, session_id=session_id)
        with self._lock:
            self._flows[flow_id] = entry
        log.info("registry.created", extra={"flow_id": flow_id})
        return entry

    def get(self, flow_id: str) -> FlowEntry:
        """
        :raises FlowNotFoundError: For unknown or closed flows.
        """
        with self._lock:
            entry = self._flows.get(flow_id)
        if entry is None:
            raise FlowNotFoundError(flow_id)
        return entry

    def close(self, flow_id: str) -> None:
        """
        Tear a flow down and forget it.

        :raises FlowNotFoundError: For unknown or already closed flows.
        """
        with self._lock:
            entry = self._flows.pop(flow_id, None)
        if entry is None:
            raise FlowNotFoundError(flow_id)
        entry.flow.teardown()

    def close_all(self) -> None:
        with self._lock:
            entries, self._flows = list(self._flows.values()), {}
        for entry in entries:
            entry.flow.teardown()
