from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from portal.services._shared.errors import BackendError


class PortalBackend(Protocol):
    """
    Port for the upstream portal REST service.

    Every method returns the normalized ``Data`` member of the response
    envelope and raises :class:`BackendError` on transport failure or when
    the envelope reports ``Success=false``.
    """

    def list_public_products(self) -> list[dict[str, Any]]: ...

    def register_employer(self, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def register_employer_paid(self, payload: Mapping[str, Any]) -> dict[str, Any]: ...

    def get_employer_status(self, emp_id: int | str) -> dict[str, Any]: ...


class StubPortalBackend(PortalBackend):
    """
    Scriptable in-memory backend used in unit tests.

    Each queue entry is either a ``dict`` returned as ``Data`` or an exception
    instance that is raised. Calls are recorded as ``(op, payload)`` tuples.
    """

    def __init__(
        self,
        *,
        products: list[dict[str, Any]] | None = None,
        statuses: list[dict[str, Any] | Exception] | None = None,
    ) -> None:
        self.products: list[dict[str, Any]] | Exception = list(products or [])
        self.statuses: list[dict[str, Any] | Exception] = list(statuses or [])
        self.register_result: dict[str, Any] | Exception = {"EmpId": 101}
        self.register_paid_result: dict[str, Any] | Exception = {
            "EmpId": 102,
            "Status": "approved",
        }
        self.calls: list[tuple[str, Any]] = []

    def ops(self) -> list[str]:
        """Operation names in call order."""
        return [op for op, _ in self.calls]

    @staticmethod
    def _answer(value: Any) -> Any:
        if isinstance(value, Exception):
            raise value
        return value

    def list_public_products(self) -> list[dict[str, Any]]:
        self.calls.append(("products", None))
        return list(self._answer(self.products))

    def register_employer(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("employer-register", dict(payload)))
        return dict(self._answer(self.register_result))

    def register_employer_paid(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        self.calls.append(("employer-register-paid", dict(payload)))
        return dict(self._answer(self.register_paid_result))

    def get_employer_status(self, emp_id: int | str) -> dict[str, Any]:
        self.calls.append(("get-employer-status", {"EmpId": emp_id}))
        if not self.statuses:
            raise BackendError("No scripted status", op="get-employer-status", transient=True)
        # The last entry repeats once the script runs out.
        value = self.statuses.pop(0) if len(self.statuses) > 1 else self.statuses[0]
        return dict(self._answer(value))
