"""
DTOs for EmployerRegistrationService.

Contracts for the employer self-registration flow: the validated form
(:class:`RegistrationDraft`), the decision taken before submission
(:class:`RegistrationIntent`) and the account observed afterwards
(:class:`EmployerAccount`).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from portal.services.catalog.dto import Product
from portal.services.payment.dto import PaymentMethod

# --------------------------------------------------------------------------- #
# Account lifecycle
# --------------------------------------------------------------------------- #


class AccountStatus(str, Enum):
    """Review state of an employer account. Only the upstream service moves it."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"

    @classmethod
    def parse(cls, raw: Any) -> AccountStatus:
        """
        Normalize an upstream status value (case-insensitive).

        ``active`` is treated as approved, matching how the portal routes
        employers whose status was set at login.

        :raises ValueError: For unknown statuses.
        """
        value = str(raw or "").strip().lower()
        if value == "active":
            return cls.APPROVED
        return cls(value)


@dataclass(frozen=True, slots=True)
class EmployerAccount:
    """
    Employer account as observed by this client.

    :param emp_id: Upstream identifier (``EmpId``/``UserId``), ``None`` when the
        upstream did not echo one back.
    :type emp_id: int | str | None
    :param status: Review status.
    :type status: :class:`AccountStatus`
    :param rejection_reason: Reason given when rejected.
    :type rejection_reason: str | None
    :param name: Contact name.
    :type name: str | None
    :param email_id: Contact email.
    :type email_id: str | None
    """

    emp_id: int | str | None
    status: AccountStatus
    rejection_reason: str | None = None
    name: str | None = None
    email_id: str | None = None

    @classmethod
    def from_payload(
        cls, raw: Mapping[str, Any] | None, *, default_status: AccountStatus
    ) -> EmployerAccount:
        """Build the account from an upstream ``Data`` object (which may be empty)."""
        data = raw or {}
        status_raw = data.get("Status", data.get("status"))
        return cls(
            emp_id=data.get("EmpId", data.get("UserId", data.get("empId"))),
            status=AccountStatus.parse(status_raw) if status_raw else default_status,
            rejection_reason=data.get("RejectionReason") or data.get("rejectionReason") or None,
            name=data.get("Name", data.get("name")),
            email_id=data.get("EmailId", data.get("emailId")),
        )


# --------------------------------------------------------------------------- #
# Input
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class RegistrationDraft:
    """
    Validated employer registration form.

    Held only in the onboarding flow's working memory until the flow ends.

    :param name: Company/contact name.
    :param company_name: Company name, defaults to ``name``.
    :param mobile_no: 10-digit mobile number starting with 6-9.
    :param email_id: Contact email.
    :param aadhar_no: 12-digit Aadhaar number.
    :param password: Account password (>= 6 chars).
    :param ticket: Sales ticket reference.
    :param product_id: Selected product (required when paying).
    :param licenses: Requested license count.
    :param is_paying: Whether the user chose instant paid approval.
    :param established_year: Year the company was established.
    :param employee_range: Declared head-count bracket.
    """

    name: str
    company_name: str
    mobile_no: str
    email_id: str
    aadhar_no: str
    password: str
    ticket: str
    product_id: int | None = None
    licenses: int | None = None
    is_paying: bool = False
    established_year: int | None = None
    employee_range: str | None = None

    def to_payload(self) -> dict[str, Any]:
        """Render the upstream registration payload (camelCase keys)."""
        return {
            "name": self.name,
            "companyName": self.company_name or self.name,
            "mobileNo": self.mobile_no,
            "emailId": self.email_id,
            "aadharNo": self.aadhar_no,
            "password": self.password,
            "ticket": self.ticket,
            "licenses": self.licenses,
        }


# --------------------------------------------------------------------------- #
# Intent
# --------------------------------------------------------------------------- #


@dataclass(frozen=True, slots=True)
class PendingIntent:
    """Submit for administrator review; approval arrives later via polling."""


@dataclass(frozen=True, slots=True)
class PayNowIntent:
    """
    Pay for instant approval.

    :param product: Product being paid for, taken from the loaded catalog.
    :type product: :class:`Product`
    :param method: Payment method pre-selected in the payment form.
    :type method: :class:`PaymentMethod`
    """

    product: Product
    method: PaymentMethod = field(default=PaymentMethod.CREDIT_CARD)


RegistrationIntent = PendingIntent | PayNowIntent


__all__ = [
    "AccountStatus",
    "EmployerAccount",
    "PayNowIntent",
    "PendingIntent",
    "RegistrationDraft",
    "RegistrationIntent",
]
