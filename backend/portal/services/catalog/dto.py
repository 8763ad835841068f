"""
DTOs for the product catalog.

Products are immutable snapshots fetched from the upstream portal for the
duration of one registration session.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from typing import Any


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y"}
    return bool(value)


def _as_price(value: Any) -> Decimal:
    if value is None or value == "":
        return Decimal("0")
    try:
        price = Decimal(str(value))
    except InvalidOperation as exc:
        raise ValueError(f"Invalid product price: {value!r}") from exc
    if price < 0:
        raise ValueError(f"Negative product price: {value!r}")
    return price


@dataclass(frozen=True, slots=True)
class Product:
    """
    Subscription product offered during employer onboarding.

    :param product_id: Unique product key (``ProductId`` upstream).
    :type product_id: int
    :param name: Display name.
    :type name: str
    :param description: Marketing description, may be empty.
    :type description: str
    :param price_per_user_monthly: Non-negative monthly price per user.
    :type price_per_user_monthly: :class:`decimal.Decimal`
    :param is_active: Whether the product can currently be purchased.
    :type is_active: bool
    """

    product_id: int
    name: str
    description: str = ""
    price_per_user_monthly: Decimal = Decimal("0")
    is_active: bool = True

    @classmethod
    def from_payload(cls, raw: Mapping[str, Any]) -> Product:
        """
        Build a product from the upstream record shape.

        ``IsActive`` arrives either as ``1``/``0`` or as a boolean.

        :raises ValueError: When ``ProductId`` is missing or the price is invalid.
        """
        product_id = raw.get("ProductId", raw.get("productId"))
        if product_id is None:
            raise ValueError("Product record without ProductId")
        return cls(
            product_id=int(product_id),
            name=str(raw.get("Name") or raw.get("name") or ""),
            description=str(raw.get("Description") or raw.get("description") or ""),
            price_per_user_monthly=_as_price(
                raw.get("PricePerUserMonthly", raw.get("pricePerUserMonthly"))
            ),
            is_active=_as_bool(raw.get("IsActive", raw.get("isActive", True))),
        )


__all__ = ["Product"]
