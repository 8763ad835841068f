"""State machine of the simulated payment step."""

from __future__ import annotations

import threading
from decimal import Decimal

import pytest
from portal.services._shared.errors import BackendError, InvalidTransitionError, PaymentError
from portal.services._shared.ports import (
    CollectingNotifier,
    Notice,
    StubPaymentProcessor,
    StubPortalBackend,
)
from portal.services.catalog.dto import Product
from portal.services.payment.dto import ChargeResult, PaymentDetails, PaymentMethod, PaymentState
from portal.services.payment.simulator import PaymentSimulator
from portal.services.registration.dto import AccountStatus, PayNowIntent
from portal.services.registration.service import EmployerRegistrationService

from tests.factories.onboarding import PaidEmployerFormFactory

PRODUCT = Product(product_id=5, name="Standard", price_per_user_monthly=Decimal("499"))
CARD = {
    "card_number": "4111111111111111",
    "card_name": "Acme Ltd",
    "expiry_date": "12/30",
    "cvv": "123",
}


@pytest.fixture()
def backend() -> StubPortalBackend:
    return StubPortalBackend()


@pytest.fixture()
def notifier() -> CollectingNotifier:
    return CollectingNotifier()


@pytest.fixture()
def registration(backend, notifier) -> EmployerRegistrationService:
    return EmployerRegistrationService(backend, notifier)


@pytest.fixture()
def draft(registration):
    return registration.load(PaidEmployerFormFactory())


def _simulator(registration, notifier, processor=None) -> PaymentSimulator:
    return PaymentSimulator(processor or StubPaymentProcessor(), registration, notifier)


class TestPaymentSimulator:
    def test_successful_card_payment_walks_every_state(self, registration, notifier, backend, draft):
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)

        state = sim.submit(draft)

        assert state is PaymentState.SUCCEEDED
        assert sim.history == [
            PaymentState.IDLE,
            PaymentState.FORM_OPEN,
            PaymentState.SUBMITTING,
            PaymentState.SUCCEEDED,
        ]
        assert backend.ops() == ["employer-register-paid"]
        assert backend.calls[0][1]["paymentMethod"] == "credit-card"
        assert sim.account is not None and sim.account.status is AccountStatus.APPROVED
        assert sim.details == PaymentDetails()

    def test_charge_uses_product_price(self, registration, notifier, draft):
        processor = StubPaymentProcessor()
        sim = _simulator(registration, notifier, processor)
        sim.open(PayNowIntent(product=PRODUCT, method=PaymentMethod.UPI))
        sim.update_details(upi_id="acme@upi")

        sim.submit(draft)

        assert processor.charges == [(Decimal("499"), PaymentMethod.UPI)]

    def test_empty_upi_id_never_submits(self, registration, notifier, backend, draft):
        processor = StubPaymentProcessor()
        sim = _simulator(registration, notifier, processor)
        sim.open(PayNowIntent(product=PRODUCT, method=PaymentMethod.UPI))

        state = sim.submit(draft)

        assert state is PaymentState.FORM_OPEN
        assert PaymentState.SUBMITTING not in sim.history
        assert processor.charges == []
        assert backend.calls == []
        assert notifier.notices == [Notice("error", "Please enter UPI ID")]

    def test_partial_card_details_never_submit(self, registration, notifier, draft):
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(card_number="4111111111111111", cvv="123")

        assert sim.submit(draft) is PaymentState.FORM_OPEN
        assert notifier.notices[-1] == Notice("error", "Please fill all card details")

    def test_declined_charge_fails_and_allows_retry(self, registration, notifier, backend, draft):
        processor = StubPaymentProcessor(
            ChargeResult(succeeded=False, message="Card declined"),
            ChargeResult(succeeded=True, reference="ok"),
        )
        sim = _simulator(registration, notifier, processor)
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)

        assert sim.submit(draft) is PaymentState.FAILED
        assert sim.last_error == "Card declined"
        assert backend.calls == []
        # typed details survive the failure
        assert sim.details.card_number == CARD["card_number"]

        assert sim.submit(draft) is PaymentState.SUCCEEDED
        assert sim.history[-3:] == [
            PaymentState.FAILED,
            PaymentState.SUBMITTING,
            PaymentState.SUCCEEDED,
        ]

    def test_gateway_error_fails_payment(self, registration, notifier, backend, draft):
        class DecliningProcessor:
            def charge(self, amount, method, details, *, cancel):
                raise PaymentError("Insufficient funds")

        sim = _simulator(registration, notifier, DecliningProcessor())
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)

        assert sim.submit(draft) is PaymentState.FAILED
        assert sim.last_error == "Insufficient funds"
        assert backend.calls == []
        assert notifier.notices[-1] == Notice("error", "Insufficient funds")

    def test_unexpected_processor_error_fails_payment(self, registration, notifier, backend, draft):
        class BrokenProcessor:
            def charge(self, amount, method, details, *, cancel):
                raise ConnectionError("gateway unreachable")

        sim = _simulator(registration, notifier, BrokenProcessor())
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)

        assert sim.submit(draft) is PaymentState.FAILED
        assert sim.last_error == "Payment failed. Please try again."
        assert backend.calls == []

    def test_close_while_registering_does_not_cancel(self, registration, notifier, backend, draft):
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)
        register_paid = backend.register_employer_paid

        def close_then_answer(payload):
            sim.close()
            return register_paid(payload)

        backend.register_employer_paid = close_then_answer

        assert sim.submit(draft) is PaymentState.SUCCEEDED
        assert sim.history == [
            PaymentState.IDLE,
            PaymentState.FORM_OPEN,
            PaymentState.SUBMITTING,
            PaymentState.SUCCEEDED,
        ]
        assert sim.account is not None

    def test_rejected_paid_registration_fails_payment(self, registration, notifier, backend, draft):
        backend.register_paid_result = BackendError("Server busy")
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)

        assert sim.submit(draft) is PaymentState.FAILED
        assert [n.message for n in notifier.notices] == [
            "Server busy",
            "Payment failed. Please try again.",
        ]

    def test_close_during_settlement_discards_outcome(self, registration, notifier, backend, draft):
        started = threading.Event()

        class SlowProcessor:
            def charge(self, amount, method, details, *, cancel):
                started.set()
                if cancel.wait(5):
                    return ChargeResult(succeeded=False, cancelled=True)
                return ChargeResult(succeeded=True)

        sim = _simulator(registration, notifier, SlowProcessor())
        sim.open(PayNowIntent(product=PRODUCT))
        sim.update_details(**CARD)
        result: list[PaymentState] = []
        worker = threading.Thread(target=lambda: result.append(sim.submit(draft)))

        worker.start()
        assert started.wait(5)
        sim.close()
        worker.join(5)

        assert result == [PaymentState.IDLE]
        assert sim.state is PaymentState.IDLE
        assert backend.calls == []

    def test_close_is_idempotent(self, registration, notifier):
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))

        sim.close()
        sim.close()

        assert sim.history == [PaymentState.IDLE, PaymentState.FORM_OPEN, PaymentState.IDLE]

    def test_submit_requires_open_form(self, registration, notifier, draft):
        sim = _simulator(registration, notifier)
        with pytest.raises(InvalidTransitionError):
            sim.submit(draft)

    def test_open_twice_is_rejected(self, registration, notifier):
        sim = _simulator(registration, notifier)
        sim.open(PayNowIntent(product=PRODUCT))
        with pytest.raises(InvalidTransitionError):
            sim.open(PayNowIntent(product=PRODUCT))
