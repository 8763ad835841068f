# comments in English; reST docstrings
"""
HTTP adapter for the upstream portal REST service.

Every call sends the uniform envelope::

    {"RequestId": "<op>-<epoch-ms>", "AuthToken": "", "Payload": {...}}

and reads ``Success``/``Message``/``Data`` in either capitalization. Calls are
never retried here; the status poller's next interval is its only retry.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import requests

from portal.services._shared.errors import BackendError
from portal.services._shared.ports import PortalBackend

log = logging.getLogger(__name__)

DEFAULT_MESSAGE = "Something went wrong. Please try again."


def _pick(body: Mapping[str, Any], *names: str) -> Any:
    for name in names:
        if name in body:
            return body[name]
    return None


@dataclass(slots=True)
class PortalBackendClient(PortalBackend):
    """
    ``requests``-based :class:`PortalBackend`.

    :param base_url: API root, e.g. ``https://weerp.wewinlimited.com/api``.
    :param timeout: Per-request timeout in seconds.
    :param auth_token: Value sent as ``AuthToken`` (empty when unauthenticated).
    :param session: Shared ``requests.Session``.
    """

    base_url: str
    timeout: float = 10.0
    auth_token: str = ""
    session: requests.Session = field(default_factory=requests.Session)

    # -------------------- API ------------------------

    def list_public_products(self) -> list[dict[str, Any]]:
        data = self._call("GET", "/master/product/public", op="products")
        if isinstance(data, Mapping):
            # Some deployments wrap the list once more.
            data = _pick(data, "Products", "products", "Items", "items")
        return [dict(item) for item in data or []]

    def register_employer(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._as_dict(
            self._call("POST", "/accounts/employer-register", op="employer-register", payload=payload)
        )

    def register_employer_paid(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        return self._as_dict(
            self._call(
                "POST",
                "/accounts/employer-register-paid",
                op="employer-register-paid",
                payload=payload,
            )
        )

    def get_employer_status(self, emp_id: int | str) -> dict[str, Any]:
        return self._as_dict(
            self._call(
                "POST",
                "/accounts/get-employer-status",
                op="get-employer-status",
                payload={"EmpId": emp_id},
            )
        )

    # -------------------- helpers --------------------

    def envelope(self, op: str, payload: Mapping[str, Any] | None) -> dict[str, Any]:
        """Build the request envelope for ``op``."""
        return {
            "RequestId": f"{op}-{int(time.time() * 1000)}",
            "AuthToken": self.auth_token,
            "Payload": dict(payload or {}),
        }

    def _call(
        self,
        method: str,
        path: str,
        *,
        op: str,
        payload: Mapping[str, Any] | None = None,
    ) -> Any:
        url = f"{self.base_url.rstrip('/')}{path}"
        start = time.perf_counter()
        try:
            if method == "GET":
                resp = self.session.get(url, timeout=self.timeout)
            else:
                resp = self.session.post(url, json=self.envelope(op, payload), timeout=self.timeout)
        except requests.RequestException as exc:
            log.warning("backend.transport_error: %s", exc, extra={"op": op, "endpoint": path})
            raise BackendError(str(exc) or DEFAULT_MESSAGE, op=op, transient=True) from exc

        elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
        try:
            body = resp.json()
        except ValueError:
            body = None

        if not resp.ok:
            message = self._message(body) or f"{resp.status_code} {resp.reason or 'Error'}"
            log.warning(
                "backend.http_error status=%s",
                resp.status_code,
                extra={"op": op, "endpoint": path, "elapsed_ms": elapsed_ms},
            )
            raise BackendError(
                message, op=op, status_code=resp.status_code, transient=resp.status_code >= 500
            )

        if not isinstance(body, Mapping):
            # Bare payloads (e.g. the public catalog list) carry no envelope.
            if isinstance(body, list):
                return body
            raise BackendError(DEFAULT_MESSAGE, op=op, status_code=resp.status_code, transient=True)

        if "Success" in body or "success" in body:
            if not _pick(body, "Success", "success"):
                message = self._message(body) or DEFAULT_MESSAGE
                log.warning(
                    "backend.rejected: %s",
                    message,
                    extra={"op": op, "endpoint": path, "elapsed_ms": elapsed_ms},
                )
                raise BackendError(message, op=op, status_code=resp.status_code)
            log.debug("backend.ok", extra={"op": op, "endpoint": path, "elapsed_ms": elapsed_ms})
            return _pick(body, "Data", "data")

        log.debug("backend.ok", extra={"op": op, "endpoint": path, "elapsed_ms": elapsed_ms})
        return body

    @staticmethod
    def _message(body: Any) -> str | None:
        if isinstance(body, Mapping):
            message = _pick(body, "Message", "message")
            if message:
                return str(message)
        return None

    @staticmethod
    def _as_dict(data: Any) -> dict[str, Any]:
        return dict(data) if isinstance(data, Mapping) else {}
