"""Local stand-in for a payment gateway."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from decimal import Decimal
from uuid import uuid4

from portal.services._shared.ports import PaymentProcessor
from portal.services.payment.dto import ChargeResult, PaymentDetails, PaymentMethod

log = logging.getLogger(__name__)


@dataclass(slots=True)
class SimulatedPaymentProcessor(PaymentProcessor):
    """
    Settles every payment after a fixed artificial delay.

    No card or UPI validation happens beyond what the simulator already
    checked. A real gateway replaces this class behind the same port.

    :param delay: Seconds of simulated gateway latency.
    """

    delay: float = 1.5

    def charge(
        self,
        amount: Decimal,
        method: PaymentMethod,
        details: PaymentDetails,
        *,
        cancel: threading.Event,
    ) -> ChargeResult:
        if cancel.wait(self.delay):
            return ChargeResult(succeeded=False, cancelled=True)
        reference = f"sim-{uuid4().hex[:12]}"
        log.info("payment.simulated method=%s amount=%s ref=%s", method.value, amount, reference)
        return ChargeResult(succeeded=True, reference=reference)
