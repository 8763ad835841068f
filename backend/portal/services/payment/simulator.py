"""
PaymentSimulator
================

State machine behind the "pay now" modal::

    Idle -> FormOpen -> Submitting -> Succeeded | Failed

- ``FormOpen -> Submitting`` only when every field required by the chosen
  method is filled; otherwise a validation notice is shown and the state
  does not move.
- ``Submitting`` runs one settlement through the injected
  :class:`~portal.services._shared.ports.PaymentProcessor`. Closing the modal
  sets the cancellation token and discards the settlement without
  finalizing the registration.
- ``Succeeded`` means the paid registration was accepted upstream.
- ``Failed`` keeps the draft and the typed details so the user can retry.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import replace
from decimal import Decimal

from portal.services._shared.base import BaseService, ServiceContext
from portal.services._shared.errors import InvalidTransitionError, PaymentError, RegistrationError
from portal.services._shared.ports import Notifier, PaymentProcessor
from portal.services.catalog.dto import Product
from portal.services.payment.dto import (
    PaymentDetails,
    PaymentInfo,
    PaymentMethod,
    PaymentState,
)
from portal.services.registration.dto import EmployerAccount, PayNowIntent, RegistrationDraft
from portal.services.registration.service import EmployerRegistrationService

log = logging.getLogger(__name__)

PAYMENT_FAILED_MESSAGE = "Payment failed. Please try again."

_MISSING_DETAILS_MESSAGE: dict[PaymentMethod, str] = {
    PaymentMethod.CREDIT_CARD: "Please fill all card details",
    PaymentMethod.UPI: "Please enter UPI ID",
}


class PaymentSimulator(BaseService):
    """Drives one payment modal for a paid registration."""

    def __init__(
        self,
        processor: PaymentProcessor,
        registration: EmployerRegistrationService,
        notifier: Notifier,
        *,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.processor = processor
        self.registration = registration
        self.notifier = notifier

        self.state = PaymentState.IDLE
        self.history: list[PaymentState] = [PaymentState.IDLE]
        self.method = PaymentMethod.CREDIT_CARD
        self.details = PaymentDetails()
        self.product: Product | None = None
        self.account: EmployerAccount | None = None
        self.last_error: str | None = None

        self._lock = threading.RLock()
        self._cancel: threading.Event | None = None
        self._settled = False

    # ------------------------------------------------------------------ #
    # Form
    # ------------------------------------------------------------------ #

    @property
    def amount(self) -> Decimal:
        """Amount charged: the selected product's monthly price."""
        return self.product.price_per_user_monthly if self.product else Decimal("0")

    def open(self, intent: PayNowIntent) -> None:
        """Open the modal for ``intent``'s product (``Idle``/``Failed`` -> ``FormOpen``)."""
        with self._lock:
            if self.state not in (PaymentState.IDLE, PaymentState.FAILED):
                raise InvalidTransitionError(f"Cannot open payment form while {self.state.value}")
            self.product = intent.product
            self.method = intent.method
            self._settled = False
            self.last_error = None
            self._move(PaymentState.FORM_OPEN)

    def select_method(self, method: PaymentMethod) -> None:
        with self._lock:
            self._ensure_editable()
            self.method = method

    def update_details(self, **changes: str) -> PaymentDetails:
        """Apply typed input to the payment form."""
        with self._lock:
            self._ensure_editable()
            self.details = replace(self.details, **changes)
            return self.details

    # ------------------------------------------------------------------ #
    # Settlement
    # ------------------------------------------------------------------ #

    def submit(self, draft: RegistrationDraft) -> PaymentState:
        """
        Settle the payment and, on success, submit the paid registration.

        Blocks for the processor's settlement time. Returns the state reached;
        when the modal was closed before settlement the result is discarded.

        :raises InvalidTransitionError: When the form is not open.
        """
        with self._lock:
            self._ensure_editable()
            missing = self.details.missing_for(self.method)
            if missing:
                self.last_error = _MISSING_DETAILS_MESSAGE[self.method]
                self.notifier.notify("error", self.last_error)
                return self.state
            cancel = self._cancel = threading.Event()
            method, details, amount = self.method, self.details, self.amount
            self.last_error = None
            self._move(PaymentState.SUBMITTING)

        log.info("payment.settling method=%s", method.value, extra=self.log_extra(op="payment"))
        try:
            result = self.processor.charge(amount, method, details, cancel=cancel)
        except PaymentError as exc:
            log.warning("payment.declined: %s", exc.message, extra=self.log_extra(op="payment"))
            return self._fail(cancel, exc.message)
        except Exception:
            log.exception("payment.processor_error", extra=self.log_extra(op="payment"))
            return self._fail(cancel, PAYMENT_FAILED_MESSAGE)

        if result.cancelled:
            log.info("payment.discarded", extra=self.log_extra(op="payment"))
            return self.state
        if not result.succeeded:
            return self._fail(cancel, result.message or PAYMENT_FAILED_MESSAGE)

        # Settled: close() no longer cancels from here on.
        with self._lock:
            if cancel.is_set():
                log.info("payment.discarded", extra=self.log_extra(op="payment"))
                return self.state
            self._settled = True

        try:
            account = self.registration.submit_paid(draft, PaymentInfo(method=method, amount=amount))
        except RegistrationError as exc:
            log.warning("payment.registration_failed: %s", exc.message, extra=self.log_extra(op="payment"))
            return self._fail(cancel, PAYMENT_FAILED_MESSAGE)

        with self._lock:
            self._settled = False
            self.account = account
            self.details = PaymentDetails()
            self._move(PaymentState.SUCCEEDED)
            return self.state

    def close(self) -> None:
        """
        Close the modal, cancelling any settlement in flight.

        Safe to call repeatedly. A payment that has already settled is not
        cancelled: it runs on to ``Succeeded`` or ``Failed``.
        """
        with self._lock:
            if self.state in (PaymentState.IDLE, PaymentState.SUCCEEDED) or self._settled:
                return
            if self._cancel is not None:
                self._cancel.set()
            self.details = PaymentDetails()
            self.last_error = None
            self._move(PaymentState.IDLE)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _fail(self, cancel: threading.Event, message: str) -> PaymentState:
        with self._lock:
            self._settled = False
            if cancel.is_set():
                return self.state
            self.last_error = message
            self._move(PaymentState.FAILED)
        self.notifier.notify("error", message)
        return PaymentState.FAILED

    def _ensure_editable(self) -> None:
        if self.state not in (PaymentState.FORM_OPEN, PaymentState.FAILED):
            raise InvalidTransitionError(f"Payment form is not open ({self.state.value})")

    def _move(self, state: PaymentState) -> None:
        self.state = state
        self.history.append(state)
