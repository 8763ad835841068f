"""
EmployerRegistrationService
===========================

Validates and submits employer self-registrations:

- ``submit_pending`` creates an account that waits for administrator review.
- ``submit_paid`` creates an already approved account once a payment settled.

Both notify the user on success and raise :class:`RegistrationError` with the
upstream message on failure. Neither decides what screen comes next; that is
the onboarding flow's job.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import replace
from typing import Any

from marshmallow import ValidationError as MarshmallowValidationError

from portal.schemas.registration import EmployerRegistrationSchema
from portal.services._shared.base import BaseService, ServiceContext
from portal.services._shared.errors import BackendError, RegistrationError, ValidationError
from portal.services._shared.ports import Notifier, PortalBackend
from portal.services.catalog.dto import Product
from portal.services.payment.dto import PaymentInfo, PaymentMethod
from portal.services.registration.dto import (
    AccountStatus,
    EmployerAccount,
    PayNowIntent,
    PendingIntent,
    RegistrationDraft,
    RegistrationIntent,
)

log = logging.getLogger(__name__)

_schema = EmployerRegistrationSchema()


class EmployerRegistrationService(BaseService):
    """Registration submitter for the employer onboarding flow."""

    def __init__(
        self,
        backend: PortalBackend,
        notifier: Notifier,
        *,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.backend = backend
        self.notifier = notifier

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate(self, form: Mapping[str, Any]) -> dict[str, list[str]]:
        """
        Validate a raw form without loading it.

        :returns: Field errors keyed by form field name; empty when the form is valid.
        """
        return _flatten(_schema.validate(dict(form)))

    def load(self, form: Mapping[str, Any]) -> RegistrationDraft:
        """
        Validate and load a raw form into a :class:`RegistrationDraft`.

        :raises ValidationError: With the field errors when the form is invalid.
        """
        try:
            return _schema.load(dict(form))
        except MarshmallowValidationError as exc:
            messages = exc.messages if isinstance(exc.messages, dict) else {"_schema": exc.messages}
            raise ValidationError(errors=_flatten(messages)) from exc

    def decide_intent(
        self,
        draft: RegistrationDraft,
        catalog: Sequence[Product],
        *,
        method: PaymentMethod = PaymentMethod.CREDIT_CARD,
    ) -> RegistrationIntent:
        """
        Decide which path a draft takes before anything is submitted.

        :raises ValidationError: When paying for a product missing from ``catalog``.
        """
        if not draft.is_paying:
            return PendingIntent()
        product = next((p for p in catalog if p.product_id == draft.product_id), None)
        if product is None:
            raise ValidationError(errors={"ProductId": ["Selected product is not available."]})
        return PayNowIntent(product=product, method=method)

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    def submit_pending(self, draft: RegistrationDraft) -> EmployerAccount:
        """
        Submit a registration request for administrator review.

        :returns: The created account with status ``pending``.
        :raises RegistrationError: When the upstream rejects the request.
        """
        log.info(
            "registration.submit_pending licenses=%s",
            draft.licenses,
            extra=self.log_extra(op="employer-register"),
        )
        try:
            data = self.backend.register_employer(draft.to_payload())
        except BackendError as exc:
            raise self._failed(exc, "Failed to submit registration request. Please try again.") from exc

        account = EmployerAccount.from_payload(data, default_status=AccountStatus.PENDING)
        self.notifier.notify(
            "success", "Registration request submitted! Please wait for admin approval."
        )
        return self._with_identity(account, draft)

    def submit_paid(self, draft: RegistrationDraft, payment: PaymentInfo) -> EmployerAccount:
        """
        Submit a registration whose instant-approval payment already settled.

        :returns: The created account with status ``approved``.
        :raises RegistrationError: When the upstream rejects the request.
        """
        payload = {
            **draft.to_payload(),
            "productId": draft.product_id,
            "isPaid": True,
            "paymentMethod": payment.method.value,
            "paymentAmount": float(payment.amount),
        }
        log.info(
            "registration.submit_paid method=%s",
            payment.method.value,
            extra=self.log_extra(op="employer-register-paid"),
        )
        try:
            data = self.backend.register_employer_paid(payload)
        except BackendError as exc:
            raise self._failed(exc, "Failed to register with payment. Please try again.") from exc

        account = EmployerAccount.from_payload(data, default_status=AccountStatus.APPROVED)
        self.notifier.notify("success", "Registration successful!")
        return self._with_identity(account, draft)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _failed(self, exc: BackendError, default: str) -> RegistrationError:
        message = exc.message or default
        log.warning(
            "registration.rejected: %s",
            message,
            extra=self.log_extra(op=exc.op, status_code=exc.status_code),
        )
        self.notifier.notify("error", message)
        return RegistrationError(message)

    @staticmethod
    def _with_identity(account: EmployerAccount, draft: RegistrationDraft) -> EmployerAccount:
        return replace(
            account,
            name=account.name or draft.name,
            email_id=account.email_id or draft.email_id,
        )


def _flatten(messages: Mapping[str, Any]) -> dict[str, list[str]]:
    flat: dict[str, list[str]] = {}
    for key, value in messages.items():
        if isinstance(value, Mapping):
            flat[key] = [str(v) for sub in value.values() for v in (sub if isinstance(sub, list) else [sub])]
        elif isinstance(value, list):
            flat[key] = [str(v) for v in value]
        else:
            flat[key] = [str(value)]
    return flat
