"""
OnboardingFlow
==============

Composes the catalog accessor, registration submitter, payment simulator and
status poller into the employer self-registration journey.

Branching
---------
The submitted form is turned into a ``RegistrationIntent`` before anything
reaches the network:

- :class:`PendingIntent` -> ``submit_pending`` -> session user written with
  status ``pending`` -> status poller started -> pending-status view.
- :class:`PayNowIntent` -> payment modal -> on settlement ``submit_paid`` ->
  session user written with status ``approved`` -> dashboard after the
  redirect delay. The poller is never started on this path.

Approval observed by the poller leads to the employer dashboard. Rejection is
terminal: the reason and the support contact are shown and nothing retries.

Concurrency
-----------
Every transition holds the flow lock. The payment settlement runs outside it
so the modal can be closed meanwhile. Scheduled callbacks (poller ticks, the
dashboard redirect) check the teardown flag before touching anything.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any

from portal import routes
from portal.services._shared.base import BaseService, ServiceContext
from portal.services._shared.errors import (
    InvalidTransitionError,
    RegistrationError,
    SessionRequiredError,
    ValidationError,
)
from portal.services._shared.ports import (
    Navigator,
    Notice,
    Notifier,
    PaymentProcessor,
    PortalBackend,
    Scheduler,
    TimerHandle,
)
from portal.services.catalog.dto import Product
from portal.services.catalog.service import ProductCatalogService
from portal.services.onboarding.dto import FlowSnapshot, FlowState, FormStep
from portal.services.payment.dto import PaymentDetails, PaymentMethod, PaymentState
from portal.services.payment.simulator import PaymentSimulator
from portal.services.polling.poller import DEFAULT_INTERVAL, StatusPoller
from portal.services.registration.dto import (
    AccountStatus,
    EmployerAccount,
    PayNowIntent,
    RegistrationDraft,
    RegistrationIntent,
)
from portal.services.registration.service import EmployerRegistrationService
from portal.services.session.dto import SessionUser
from portal.services.session.service import SessionContext

log = logging.getLogger(__name__)

DEFAULT_SUPPORT_EMAIL = "support@wewinerp.com"
EMPLOYER_ROLE = "Employer"


class OnboardingFlow(BaseService):
    """
    One employer's onboarding journey.

    :param flow_id: Identifier used for log correlation and lookup.
    :param backend: Upstream portal service.
    :param session: Session context the flow writes the employer into.
    :param notifier: Toast sink.
    :param navigator: Client navigation sink.
    :param scheduler: Timer source for polling and the dashboard redirect.
    :param processor: Payment settlement capability.
    :param poll_interval: Seconds between status queries.
    :param redirect_delay: Seconds between paid success and the dashboard.
    :param support_email: Contact shown on the rejected screen.
    """

    def __init__(
        self,
        *,
        flow_id: str,
        backend: PortalBackend,
        session: SessionContext,
        notifier: Notifier,
        navigator: Navigator,
        scheduler: Scheduler,
        processor: PaymentProcessor,
        poll_interval: float = DEFAULT_INTERVAL,
        redirect_delay: float = 3.0,
        support_email: str = DEFAULT_SUPPORT_EMAIL,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx or ServiceContext(flow_id=flow_id))
        self.flow_id = flow_id
        self.backend = backend
        self.session = session
        self.notifier = notifier
        self.navigator = navigator
        self.scheduler = scheduler
        self.poll_interval = poll_interval
        self.redirect_delay = redirect_delay
        self.support_email = support_email

        self.catalog = ProductCatalogService(backend, notifier, ctx=self.ctx)
        self.registration = EmployerRegistrationService(backend, notifier, ctx=self.ctx)
        self.payment = PaymentSimulator(processor, self.registration, notifier, ctx=self.ctx)

        self.state = FlowState.FORM
        self.step = FormStep.EMPLOYER_FORM
        self.products: list[Product] = []
        self.draft: RegistrationDraft | None = None
        self.intent: RegistrationIntent | None = None
        self.account: EmployerAccount | None = None
        self.errors: dict[str, list[str]] = {}
        self.poller: StatusPoller | None = None

        self._redirect: TimerHandle | None = None
        self._lock = threading.RLock()
        self._torn_down = False

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    # ------------------------------------------------------------------ #
    # Form
    # ------------------------------------------------------------------ #

    def load_catalog(self) -> list[Product]:
        """Load the product catalog; an upstream failure leaves it empty."""
        products = self.catalog.products_or_empty()
        with self._lock:
            self._ensure_active()
            self.products = products
            return list(products)

    def submit(
        self, form: Mapping[str, Any], *, method: PaymentMethod = PaymentMethod.CREDIT_CARD
    ) -> FlowState:
        """
        Validate the registration form and take the chosen branch.

        Registration failures are notified and leave the flow on the form.

        :returns: The state reached.
        :raises ValidationError: When the form is invalid; nothing is submitted.
        :raises InvalidTransitionError: When the flow is past the form.
        """
        with self._lock:
            self._ensure_active()
            self._ensure_state(FlowState.FORM)
            try:
                draft = self.registration.load(form)
                intent = self.registration.decide_intent(draft, self.products, method=method)
            except ValidationError as exc:
                self.errors = {k: list(v) for k, v in exc.errors.items()}
                raise
            self.errors = {}
            self.draft = draft
            self.intent = intent

            if isinstance(intent, PayNowIntent):
                self.payment.open(intent)
                self.state = FlowState.PAYMENT
                log.info("onboarding.payment_opened", extra=self.log_extra(op="submit"))
                return self.state

            try:
                account = self.registration.submit_pending(draft)
            except RegistrationError:
                return self.state
            self._enter_pending(account)
            return self.state

    # ------------------------------------------------------------------ #
    # Payment
    # ------------------------------------------------------------------ #

    def select_payment_method(self, method: PaymentMethod) -> None:
        with self._lock:
            self._ensure_active()
            self._ensure_state(FlowState.PAYMENT)
            self.payment.select_method(method)

    def update_payment_details(self, **fields: str) -> PaymentDetails:
        with self._lock:
            self._ensure_active()
            self._ensure_state(FlowState.PAYMENT)
            return self.payment.update_details(**fields)

    def pay(self) -> PaymentState:
        """
        Settle the payment and finalize the paid registration.

        Blocks for the settlement delay. A modal closed before settlement or a
        flow torn down meanwhile discards the outcome.
        """
        with self._lock:
            self._ensure_active()
            self._ensure_state(FlowState.PAYMENT)
            draft = self.draft
        assert draft is not None

        outcome = self.payment.submit(draft)

        with self._lock:
            if self._torn_down or self.state is not FlowState.PAYMENT:
                return outcome
            if outcome is PaymentState.SUCCEEDED and self.payment.account is not None:
                self._enter_approved_by_payment(self.payment.account)
            return outcome

    def close_payment(self) -> None:
        """
        Close the payment modal and return to the form with the draft kept.

        Ignored once the payment has settled; :meth:`pay` finishes it.
        """
        with self._lock:
            self.payment.close()
            if self.state is FlowState.PAYMENT and self.payment.state is PaymentState.IDLE:
                self.state = FlowState.FORM
                self.intent = None

    # ------------------------------------------------------------------ #
    # Pending status view
    # ------------------------------------------------------------------ #

    def resume_pending(self) -> FlowState:
        """
        Open the pending-status view for the employer already in the session.

        :raises SessionRequiredError: Without an employer session; the client
            is sent to the login page.
        """
        user = self.session.read()
        if user is None or user.role != EMPLOYER_ROLE:
            self.navigator.navigate(routes.LOGIN)
            raise SessionRequiredError()

        products = self.catalog.products_or_empty()
        with self._lock:
            self._ensure_active()
            self._ensure_state(FlowState.FORM)
            self.products = products
            self.account = EmployerAccount(
                emp_id=user.user_id,
                status=_account_status(user.status),
                rejection_reason=user.rejection_reason,
                name=user.name,
                email_id=user.email_id,
            )
            if self.account.status is AccountStatus.APPROVED:
                self.state = FlowState.APPROVED
                self.navigator.navigate(routes.dashboard_route_for(user))
            elif self.account.status is AccountStatus.REJECTED:
                self.state = FlowState.REJECTED
                self.navigator.navigate(routes.EMPLOYER_PENDING)
            else:
                self.state = FlowState.PENDING
                self._start_poller(user.user_id)
                self.navigator.navigate(routes.EMPLOYER_PENDING)
            return self.state

    def logout(self) -> None:
        """Clear the session user, tear the flow down and go to login."""
        self.session.clear()
        self.teardown()
        self.navigator.navigate(routes.LOGIN)

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def teardown(self) -> None:
        """Cancel the poller, the pending redirect and any settlement. Idempotent."""
        with self._lock:
            if self._torn_down:
                return
            self._torn_down = True
            poller, self.poller = self.poller, None
            redirect, self._redirect = self._redirect, None
            self.payment.close()
        if poller is not None:
            poller.stop()
        if redirect is not None:
            redirect.cancel()
        log.info("onboarding.teardown state=%s", self.state.value, extra=self.log_extra())

    def snapshot(self, *, notices: Sequence[Notice] = ()) -> FlowSnapshot:
        """Read model of the flow; ``notices`` are the toasts drained for this response."""
        with self._lock:
            account = self.account
            return FlowSnapshot(
                flow_id=self.flow_id,
                state=self.state,
                step=self.step,
                route=self.navigator.current,
                products=tuple(self.products),
                payment_state=self.payment.state,
                payment_method=self.payment.method,
                emp_id=account.emp_id if account else None,
                account_status=account.status.value if account else None,
                rejection_reason=account.rejection_reason if account else None,
                support_email=self.support_email if self.state is FlowState.REJECTED else None,
                errors={k: list(v) for k, v in self.errors.items()},
                notices=tuple(notices),
            )

    # ------------------------------------------------------------------ #
    # Transitions
    # ------------------------------------------------------------------ #

    def _enter_pending(self, account: EmployerAccount) -> None:
        draft = self.draft
        assert draft is not None
        self.account = account
        self.state = FlowState.PENDING
        if account.emp_id is None:
            # No identity to poll with; the status view would be a dead end.
            log.warning("onboarding.pending_without_id", extra=self.log_extra())
            self.navigator.navigate(routes.LOGIN)
            return
        self.session.write(_session_user(account, draft, status=AccountStatus.PENDING))
        self._start_poller(account.emp_id)
        self.navigator.navigate(routes.EMPLOYER_PENDING)

    def _enter_approved_by_payment(self, account: EmployerAccount) -> None:
        draft = self.draft
        assert draft is not None
        self.account = account
        self.state = FlowState.APPROVED
        if account.emp_id is not None:
            self.session.write(_session_user(account, draft, status=AccountStatus.APPROVED))
        self._redirect = self.scheduler.call_later(self.redirect_delay, self._redirect_to_dashboard)
        log.info("onboarding.paid", extra=self.log_extra(emp_id=account.emp_id))

    def _start_poller(self, emp_id: int | str) -> None:
        self.poller = StatusPoller(
            self.backend,
            self.scheduler,
            on_approved=self._on_approved,
            on_rejected=self._on_rejected,
            on_status=self._on_status,
            interval=self.poll_interval,
            ctx=self.ctx,
        )
        self.poller.start(emp_id)

    def _redirect_to_dashboard(self) -> None:
        with self._lock:
            if self._torn_down:
                return
            self._redirect = None
            self.navigator.navigate(routes.EMPLOYER_DASHBOARD)

    def _on_status(self, account: EmployerAccount) -> None:
        with self._lock:
            if self._torn_down or self.state is not FlowState.PENDING:
                return
            self.account = account

    def _on_approved(self, account: EmployerAccount) -> None:
        with self._lock:
            if self._torn_down or self.state is not FlowState.PENDING:
                return
            self.account = account
            self.state = FlowState.APPROVED
            user = self._update_session_status(AccountStatus.APPROVED, None)
            self.navigator.navigate(
                routes.dashboard_route_for(user) if user else routes.EMPLOYER_DASHBOARD
            )

    def _on_rejected(self, account: EmployerAccount) -> None:
        with self._lock:
            if self._torn_down or self.state is not FlowState.PENDING:
                return
            self.account = account
            self.state = FlowState.REJECTED
            self._update_session_status(AccountStatus.REJECTED, account.rejection_reason)
            log.info("onboarding.rejected", extra=self.log_extra(emp_id=account.emp_id))

    def _update_session_status(
        self, status: AccountStatus, reason: str | None
    ) -> SessionUser | None:
        try:
            return self.session.update_status(status.value, rejection_reason=reason)
        except SessionRequiredError:
            log.warning("onboarding.session_missing", extra=self.log_extra())
            return None

    # ------------------------------------------------------------------ #
    # Guards
    # ------------------------------------------------------------------ #

    def _ensure_active(self) -> None:
        if self._torn_down:
            raise InvalidTransitionError("Onboarding flow was closed")

    def _ensure_state(self, *allowed: FlowState) -> None:
        if self.state not in allowed:
            raise InvalidTransitionError(f"Not allowed while {self.state.value}")


def _account_status(raw: str) -> AccountStatus:
    try:
        return AccountStatus.parse(raw)
    except ValueError:
        return AccountStatus.PENDING


def _session_user(
    account: EmployerAccount, draft: RegistrationDraft, *, status: AccountStatus
) -> SessionUser:
    return SessionUser(
        user_id=account.emp_id,
        role=EMPLOYER_ROLE,
        name=account.name or draft.name,
        status=status.value,
        email_id=account.email_id or draft.email_id,
        company_name=draft.company_name,
    )
