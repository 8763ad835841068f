# portal/services/_shared/base.py
from __future__ import annotations

from dataclasses import dataclass

from portal.core import errors as api_errors
from portal.services._shared.errors import (
    BackendError,
    FetchError,
    FlowNotFoundError,
    InvalidTransitionError,
    PaymentError,
    RegistrationError,
    ServiceError,
    SessionRequiredError,
    ValidationError,
)


@dataclass(slots=True)
class ServiceContext:
    """
    Carry cross-cutting data (correlation ids) into services.

    :param request_id: Correlation id for logging/tracing.
    :param flow_id: Onboarding flow the call belongs to.
    """

    request_id: str | None = None
    flow_id: str | None = None


class BaseService:
    """
    Base class for application services.

    Responsibilities
    ----------------
    * Carry the service context used for log correlation.
    * Centralize error translation to API errors.
    * Keep services thin and free of web leakage.
    """

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        """
        Initialize the base service.

        :param ctx: Optional context (tracing ids).
        :type ctx: ServiceContext | None
        """
        self.ctx = ctx or ServiceContext()

    def log_extra(self, **extra: object) -> dict[str, object]:
        """Build ``extra`` for log records, always carrying the flow id."""
        return {"flow_id": self.ctx.flow_id, **extra}

    # -------------------------- Error handling ------------------------------

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map domain/service-level errors to API-level (HTTP) errors.

        :param exc: Exception raised within the service.
        :type exc: Exception
        :returns: Translated exception ready to be re-raised.
        :rtype: Exception
        """
        if isinstance(exc, FlowNotFoundError):
            return api_errors.NotFound(str(exc))

        if isinstance(exc, SessionRequiredError):
            return api_errors.Unauthorized(exc.message)

        if isinstance(exc, InvalidTransitionError):
            return api_errors.Conflict(exc.message)

        if isinstance(exc, ValidationError):
            return api_errors.UnprocessableEntity(
                details={"errors": {k: list(v) for k, v in exc.errors.items()}}
            )

        if isinstance(exc, (BackendError, FetchError)):
            return api_errors.BadGateway(exc.message)

        if isinstance(exc, (RegistrationError, PaymentError)):
            return api_errors.APIError(message=exc.message, status_code=400, code="bad_request")

        # Any other ServiceError subclass → 400 Bad Request
        if isinstance(exc, ServiceError):
            return api_errors.APIError(message=str(exc), status_code=400, code="bad_request")

        # Fallback: return untouched (will bubble up to Flask handler)
        return exc
