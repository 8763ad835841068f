"""End-to-end behaviour of the onboarding flow with in-memory collaborators."""

from __future__ import annotations

import pytest
from portal import routes
from portal.services._shared.errors import (
    BackendError,
    InvalidTransitionError,
    SessionRequiredError,
    ValidationError,
)
from portal.services.onboarding.dto import FlowState
from portal.services.payment.dto import PaymentMethod, PaymentState
from portal.services.session.dto import SessionUser

from tests.factories.onboarding import EmployerFormFactory, PaidEmployerFormFactory

SCENARIO_FORM = {
    "Name": "Acme",
    "MobileNo": "9123456789",
    "EmailId": "a@b.com",
    "AadharNo": "123456789012",
    "Password": "secret1",
    "Ticket": "T1",
    "isPaying": False,
}
CARD = {
    "card_number": "4111111111111111",
    "card_name": "Acme Ltd",
    "expiry_date": "12/30",
    "cvv": "123",
}


class TestPendingPath:
    def test_submit_pending_only(self, flow, backend, processor, navigator, session_store):
        state = flow.submit(SCENARIO_FORM)

        assert state is FlowState.PENDING
        assert backend.ops() == ["products", "employer-register"]
        assert navigator.current == routes.EMPLOYER_PENDING
        assert processor.charges == []
        assert flow.payment.history == [PaymentState.IDLE]
        assert flow.poller is not None and flow.poller.running
        assert session_store.read() == SessionUser(
            user_id=101,
            role="Employer",
            name="Acme",
            status="pending",
            email_id="a@b.com",
            company_name="Acme",
        )

    def test_approval_navigates_to_dashboard_once(
        self, flow, backend, scheduler, navigator, session_store
    ):
        backend.statuses = [{"Status": "pending"}, {"Status": "approved"}]
        flow.submit(EmployerFormFactory())

        scheduler.advance(60)
        assert flow.state is FlowState.PENDING
        scheduler.advance(60)
        scheduler.advance(600)

        assert flow.state is FlowState.APPROVED
        assert navigator.history.count(routes.EMPLOYER_DASHBOARD) == 1
        assert navigator.current == routes.EMPLOYER_DASHBOARD
        assert session_store.read().status == "approved"
        assert backend.ops().count("get-employer-status") == 2

    def test_rejection_is_terminal_with_support_contact(
        self, flow, backend, scheduler, navigator, session_store
    ):
        backend.statuses = [{"Status": "rejected", "RejectionReason": "Invalid ticket"}]
        flow.submit(EmployerFormFactory())

        scheduler.advance(60)
        scheduler.advance(600)
        snap = flow.snapshot()

        assert snap.state is FlowState.REJECTED
        assert snap.rejection_reason == "Invalid ticket"
        assert snap.support_email == "support@wewinerp.com"
        assert navigator.current == routes.EMPLOYER_PENDING
        assert session_store.read().status == "rejected"
        assert backend.ops().count("get-employer-status") == 1

    def test_registration_failure_stays_on_form(self, flow, backend, navigator, notifier):
        backend.register_result = BackendError("Mobile number already registered")

        state = flow.submit(EmployerFormFactory())

        assert state is FlowState.FORM
        assert navigator.history == []
        assert notifier.notices[-1].message == "Mobile number already registered"
        assert flow.poller is None

        backend.register_result = {"EmpId": 55}
        assert flow.submit(EmployerFormFactory()) is FlowState.PENDING

    def test_missing_employer_id_sends_to_login(self, flow, backend, navigator, session_store):
        backend.register_result = {}

        assert flow.submit(EmployerFormFactory()) is FlowState.PENDING

        assert navigator.current == routes.LOGIN
        assert flow.poller is None
        assert session_store.read() is None

    def test_invalid_form_never_reaches_network(self, flow, backend):
        with pytest.raises(ValidationError):
            flow.submit(EmployerFormFactory(AadharNo="123"))

        assert backend.ops() == ["products"]
        assert "AadharNo" in flow.snapshot().errors
        assert flow.state is FlowState.FORM

    def test_teardown_stops_polling(self, flow, backend, scheduler):
        backend.statuses = [{"Status": "approved"}]
        flow.submit(EmployerFormFactory())

        flow.teardown()
        flow.teardown()
        scheduler.advance(600)

        assert "get-employer-status" not in backend.ops()
        assert flow.state is FlowState.PENDING
        with pytest.raises(InvalidTransitionError):
            flow.load_catalog()


class TestPaidPath:
    def test_paid_path_skips_polling_and_redirects_after_delay(
        self, flow, backend, scheduler, navigator, session_store
    ):
        assert flow.submit(PaidEmployerFormFactory(ProductId=5)) is FlowState.PAYMENT
        flow.update_payment_details(**CARD)

        outcome = flow.pay()

        assert outcome is PaymentState.SUCCEEDED
        assert flow.payment.history == [
            PaymentState.IDLE,
            PaymentState.FORM_OPEN,
            PaymentState.SUBMITTING,
            PaymentState.SUCCEEDED,
        ]
        assert backend.ops() == ["products", "employer-register-paid"]
        assert backend.calls[-1][1]["paymentMethod"] == "credit-card"
        assert flow.state is FlowState.APPROVED
        assert flow.poller is None
        assert session_store.read().status == "approved"

        scheduler.advance(2)
        assert navigator.current is None
        scheduler.advance(1)
        assert navigator.current == routes.EMPLOYER_DASHBOARD

        scheduler.advance(600)
        assert "get-employer-status" not in backend.ops()

    def test_empty_upi_id_shows_notice(self, flow, backend, notifier):
        flow.submit(PaidEmployerFormFactory(ProductId=5), method=PaymentMethod.UPI)
        draft = flow.draft

        assert flow.pay() is PaymentState.FORM_OPEN
        assert PaymentState.SUBMITTING not in flow.payment.history
        assert notifier.notices[-1].message == "Please enter UPI ID"
        assert flow.draft == draft
        assert "employer-register-paid" not in backend.ops()

    def test_close_payment_returns_to_form_keeping_draft(self, flow, backend):
        flow.submit(PaidEmployerFormFactory(ProductId=5))
        draft = flow.draft

        flow.close_payment()

        assert flow.state is FlowState.FORM
        assert flow.draft == draft
        assert flow.payment.state is PaymentState.IDLE
        assert flow.submit(PaidEmployerFormFactory(ProductId=5)) is FlowState.PAYMENT

    def test_close_after_settlement_still_approves(
        self, flow, backend, scheduler, navigator, session_store, monkeypatch
    ):
        flow.submit(PaidEmployerFormFactory(ProductId=5))
        flow.update_payment_details(**CARD)
        register_paid = backend.register_employer_paid

        def close_then_answer(payload):
            flow.close_payment()
            return register_paid(payload)

        monkeypatch.setattr(backend, "register_employer_paid", close_then_answer)

        assert flow.pay() is PaymentState.SUCCEEDED
        assert PaymentState.IDLE not in flow.payment.history[1:]
        assert flow.state is FlowState.APPROVED
        assert session_store.read().status == "approved"

        scheduler.advance(3)
        assert navigator.current == routes.EMPLOYER_DASHBOARD

    def test_teardown_cancels_dashboard_redirect(self, flow, scheduler, navigator):
        flow.submit(PaidEmployerFormFactory(ProductId=5))
        flow.update_payment_details(**CARD)
        flow.pay()

        flow.teardown()
        scheduler.advance(10)

        assert navigator.current is None

    def test_unknown_product_is_rejected_before_payment(self, flow):
        with pytest.raises(ValidationError):
            flow.submit(PaidEmployerFormFactory(ProductId=9))

        assert flow.state is FlowState.FORM
        assert flow.payment.state is PaymentState.IDLE

    def test_payment_operations_require_payment_state(self, flow):
        with pytest.raises(InvalidTransitionError):
            flow.pay()


class TestResumePending:
    def test_without_session_redirects_to_login(self, flow, navigator):
        with pytest.raises(SessionRequiredError):
            flow.resume_pending()

        assert navigator.current == routes.LOGIN

    def test_non_employer_redirects_to_login(self, flow, navigator, session_store):
        session_store.write(SessionUser(user_id=1, role="Agent", name="A", status="active"))

        with pytest.raises(SessionRequiredError):
            flow.resume_pending()

        assert navigator.current == routes.LOGIN

    def test_pending_employer_starts_polling(self, flow, backend, scheduler, navigator, session_store):
        session_store.write(SessionUser(user_id=9, role="Employer", name="Acme", status="pending"))
        backend.statuses = [{"Status": "approved"}]

        assert flow.resume_pending() is FlowState.PENDING
        assert navigator.current == routes.EMPLOYER_PENDING

        scheduler.advance(60)

        assert backend.calls[-1] == ("get-employer-status", {"EmpId": 9})
        assert navigator.current == routes.EMPLOYER_DASHBOARD

    def test_approved_employer_goes_to_dashboard(self, flow, navigator, session_store, scheduler):
        session_store.write(SessionUser(user_id=9, role="Employer", name="Acme", status="active"))

        assert flow.resume_pending() is FlowState.APPROVED
        assert navigator.current == routes.EMPLOYER_DASHBOARD
        assert scheduler.pending() == []

    def test_rejected_employer_sees_reason(self, flow, session_store, scheduler):
        session_store.write(
            SessionUser(
                user_id=9,
                role="Employer",
                name="Acme",
                status="rejected",
                rejection_reason="Duplicate",
            )
        )

        assert flow.resume_pending() is FlowState.REJECTED
        assert flow.snapshot().rejection_reason == "Duplicate"
        assert scheduler.pending() == []


def test_logout_clears_session(flow, navigator, session_store) -> None:
    """Logging out forgets the session user and lands on login."""

    # Arrange
    flow.submit(EmployerFormFactory())

    # Act
    flow.logout()

    # Assert
    assert session_store.read() is None
    assert navigator.current == routes.LOGIN
    assert flow.torn_down
