"""HTTP helper utilities for tests."""

from __future__ import annotations

import json
from typing import Any

import responses

from tests.factories.onboarding import ProductRecordFactory

API_URL = "https://portal.test/api"


def json_headers() -> dict[str, str]:
    """Return standard JSON headers."""

    return {"Content-Type": "application/json", "Accept": "application/json"}


def envelope(
    data: Any = None, *, success: bool = True, message: str = "", capitalized: bool = True
) -> dict:
    """Build an upstream response envelope.

    Parameters
    ----------
    capitalized:
        Use ``Success``/``Message``/``Data`` when ``True``, the lowercase
        spelling otherwise.
    """

    if capitalized:
        return {"Success": success, "Message": message, "Data": data}
    return {"success": success, "message": message, "data": data}


def sent_envelope(call: responses.Call) -> dict:
    """Decode the JSON body a mocked request was sent with."""

    return json.loads(call.request.body)


def mock_products(rsps: responses.RequestsMock, *records: dict) -> None:
    """Register the public catalog endpoint on ``rsps``."""

    rsps.add(
        responses.GET,
        f"{API_URL}/master/product/public",
        json=envelope(list(records) or [ProductRecordFactory(ProductId=5)]),
    )
