"""
DTOs for the payment simulator.

The payment step never talks to a real gateway; these contracts are shaped so
one can be plugged in behind :class:`~portal.services._shared.ports.PaymentProcessor`
without touching the simulator's state machine.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


class PaymentMethod(str, Enum):
    """Supported payment methods."""

    CREDIT_CARD = "credit-card"
    UPI = "upi"


class PaymentState(str, Enum):
    """States of the payment modal."""

    IDLE = "idle"
    FORM_OPEN = "form_open"
    SUBMITTING = "submitting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


# Method-specific fields that must be non-empty before settlement is attempted.
REQUIRED_DETAILS: dict[PaymentMethod, tuple[str, ...]] = {
    PaymentMethod.CREDIT_CARD: ("card_number", "card_name", "expiry_date", "cvv"),
    PaymentMethod.UPI: ("upi_id",),
}


@dataclass(frozen=True, slots=True)
class PaymentDetails:
    """Raw inputs typed into the payment form."""

    card_number: str = ""
    card_name: str = ""
    expiry_date: str = ""
    cvv: str = ""
    upi_id: str = ""

    def missing_for(self, method: PaymentMethod) -> list[str]:
        """Return the required fields for ``method`` that are still blank."""
        return [name for name in REQUIRED_DETAILS[method] if not getattr(self, name).strip()]


@dataclass(frozen=True, slots=True)
class PaymentInfo:
    """
    Settled payment attached to a paid registration.

    :param method: Method used.
    :type method: :class:`PaymentMethod`
    :param amount: Charged amount (the product's monthly price).
    :type amount: :class:`decimal.Decimal`
    :param status: ``"paid"`` once settlement completed.
    :type status: str
    """

    method: PaymentMethod
    amount: Decimal
    status: str = "paid"


@dataclass(frozen=True, slots=True)
class ChargeResult:
    """Outcome reported by a payment processor."""

    succeeded: bool
    cancelled: bool = False
    reference: str | None = None
    message: str | None = None


__all__ = [
    "ChargeResult",
    "PaymentDetails",
    "PaymentInfo",
    "PaymentMethod",
    "PaymentState",
    "REQUIRED_DETAILS",
]
