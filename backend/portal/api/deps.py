"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, jsonify, request

from portal.core.extensions import BACKEND_KEY, REGISTRY_KEY
from portal.services._shared.base import BaseService
from portal.services._shared.errors import ServiceError
from portal.services._shared.ports import PortalBackend
from portal.services.onboarding.registry import FlowRegistry

F = TypeVar("F", bound=Callable[..., Any])


def get_registry() -> FlowRegistry:
    """Return the onboarding flow registry bound to the current application."""

    return cast(FlowRegistry, current_app.extensions[REGISTRY_KEY])


def get_backend() -> PortalBackend:
    """Return the upstream portal client bound to the current application."""

    return cast(PortalBackend, current_app.extensions[BACKEND_KEY])


def json_body() -> dict[str, Any]:
    """Return the JSON request body, ``{}`` when absent or not an object."""

    body = request.get_json(silent=True)
    return body if isinstance(body, dict) else {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def service_errors(func: F) -> F:
    """Re-raise service-layer errors as API errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        try:
            return func(*args, **kwargs)
        except ServiceError as exc:
            raise BaseService().translate_exceptions(exc) from exc

    return wrapper  # type: ignore[return-value]


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]
