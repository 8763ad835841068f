"""
DTOs for the onboarding flow.

``FlowState`` is the orchestrator's top-level state::

    Form(step) -> Pending | Payment -> Approved | Rejected

``FlowSnapshot`` is the read model handed to the HTTP layer after every
operation; it carries the route the client should be on instead of
performing navigation itself.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from portal.services._shared.ports import Notice
from portal.services.catalog.dto import Product
from portal.services.payment.dto import PaymentMethod, PaymentState


class FlowState(str, Enum):
    FORM = "form"
    PENDING = "pending"
    PAYMENT = "payment"
    APPROVED = "approved"
    REJECTED = "rejected"


class FormStep(str, Enum):
    """
    Pages inside the ``form`` state.

    Employers fill a single page. The citizen registration walks
    ``mobile_verify -> otp_verify -> profile``.
    """

    EMPLOYER_FORM = "employer_form"
    MOBILE_VERIFY = "mobile_verify"
    OTP_VERIFY = "otp_verify"
    PROFILE = "profile"


@dataclass(frozen=True, slots=True)
class FlowSnapshot:
    """
    Point-in-time view of one onboarding flow.

    :param flow_id: Flow identifier.
    :param state: Top-level state.
    :param step: Page inside the form state.
    :param route: Client route the flow last navigated to.
    :param products: Loaded catalog.
    :param payment_state: Payment modal state.
    :param payment_method: Selected payment method.
    :param emp_id: Employer id once registered.
    :param account_status: Last observed review status.
    :param rejection_reason: Reason when rejected.
    :param support_email: Contact address shown when rejected.
    :param errors: Field errors of the last submission.
    :param notices: Notifications raised since the previous snapshot.
    """

    flow_id: str
    state: FlowState
    step: FormStep
    route: str | None
    products: Sequence[Product] = field(default_factory=tuple)
    payment_state: PaymentState = PaymentState.IDLE
    payment_method: PaymentMethod = PaymentMethod.CREDIT_CARD
    emp_id: int | str | None = None
    account_status: str | None = None
    rejection_reason: str | None = None
    support_email: str | None = None
    errors: Mapping[str, Sequence[str]] = field(default_factory=dict)
    notices: Sequence[Notice] = field(default_factory=tuple)


__all__ = ["FlowSnapshot", "FlowState", "FormStep"]
