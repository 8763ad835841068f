from __future__ import annotations

import threading
from decimal import Decimal
from typing import Protocol

from portal.services.payment.dto import ChargeResult, PaymentDetails, PaymentMethod


class PaymentProcessor(Protocol):
    """
    Port for settling a payment.

    Implementations must return promptly with ``cancelled=True`` once
    ``cancel`` is set. A gateway decline may be raised as
    :class:`~portal.services._shared.errors.PaymentError`.
    """

    def charge(
        self,
        amount: Decimal,
        method: PaymentMethod,
        details: PaymentDetails,
        *,
        cancel: threading.Event,
    ) -> ChargeResult: ...


class StubPaymentProcessor(PaymentProcessor):
    """Immediate processor used in unit tests; ``outcomes`` are consumed in order."""

    def __init__(self, *outcomes: ChargeResult) -> None:
        self.outcomes = list(outcomes) or [ChargeResult(succeeded=True, reference="stub-1")]
        self.charges: list[tuple[Decimal, PaymentMethod]] = []

    def charge(
        self,
        amount: Decimal,
        method: PaymentMethod,
        details: PaymentDetails,
        *,
        cancel: threading.Event,
    ) -> ChargeResult:
        self.charges.append((amount, method))
        if cancel.is_set():
            return ChargeResult(succeeded=False, cancelled=True)
        return self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
