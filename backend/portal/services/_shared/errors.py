"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP directly. They serve as stable contracts between the
upstream adapter, the onboarding services and the API layer.

The translation to HTTP responses (RFC 7807) is handled by
``portal/core/errors.py`` via ``BaseService.translate_exceptions()``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field

# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - Every onboarding error path leaves the user in an editable state; only
      :class:`SessionRequiredError` forces a redirect.
    """

    pass


# --------------------------------------------------------------------------- #
# Upstream
# --------------------------------------------------------------------------- #


class BackendError(ServiceError):
    """
    Raised by the upstream adapter when a call fails.

    :param message: User-facing message (upstream ``Message`` when present).
    :param op: Operation name used in the request id (e.g. ``"employer-register"``).
    :param status_code: HTTP status when a response was received.
    :param transient: ``True`` for transport failures (connection, timeout, 5xx).
    """

    def __init__(
        self,
        message: str,
        *,
        op: str | None = None,
        status_code: int | None = None,
        transient: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.op = op
        self.status_code = status_code
        self.transient = transient


# --------------------------------------------------------------------------- #
# Onboarding taxonomy
# --------------------------------------------------------------------------- #


@dataclass(slots=True)
class ValidationError(ServiceError):
    """
    Client-side, field-level validation failure. Never reaches the network.

    :param errors: Mapping of field name to messages.
    :type errors: Mapping[str, Sequence[str]]
    """

    errors: Mapping[str, Sequence[str]] = field(default_factory=dict)

    def __str__(self) -> str:  # pragma: no cover
        fields = ", ".join(sorted(self.errors)) or "form"
        return f"Invalid fields: {fields}"


class FetchError(ServiceError):
    """Catalog or status query failed."""

    def __init__(self, message: str = "Failed to fetch data.") -> None:
        super().__init__(message)
        self.message = message


class RegistrationError(ServiceError):
    """The upstream rejected a registration submission."""

    def __init__(self, message: str = "Registration failed.") -> None:
        super().__init__(message)
        self.message = message


class PaymentError(ServiceError):
    """Simulated settlement failed; the draft is kept so the user can retry."""

    def __init__(self, message: str = "Payment failed. Please try again.") -> None:
        super().__init__(message)
        self.message = message


class SessionRequiredError(ServiceError):
    """A protected flow needs a session identity and there is none."""

    def __init__(self, message: str = "Please log in to continue.") -> None:
        super().__init__(message)
        self.message = message


@dataclass(slots=True)
class FlowNotFoundError(ServiceError):
    """Raised when an onboarding flow id is unknown or already torn down."""

    flow_id: str

    def __str__(self) -> str:  # pragma: no cover
        return f"Onboarding flow not found: {self.flow_id}"


class InvalidTransitionError(ServiceError):
    """An operation was requested in a state that does not allow it."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


__all__ = [
    "BackendError",
    "FetchError",
    "FlowNotFoundError",
    "InvalidTransitionError",
    "PaymentError",
    "RegistrationError",
    "ServiceError",
    "SessionRequiredError",
    "ValidationError",
]
