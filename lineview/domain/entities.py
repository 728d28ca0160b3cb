"""Domain value objects for line items and the products they reference."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional, Sequence


def _pick(payload: Mapping[str, Any], keys: Sequence[str]) -> Any:
    """Return the first present value among alias keys."""
    for key in keys:
        if key in payload and payload[key] is not None:
            return payload[key]
    return None


def _as_text(value: Any) -> str:
    return str(value).strip() if value is not None else ""


def _as_int(value: Any, *, field: str) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{field} must be an integer, got bool.")
    try:
        number = float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be numeric, got {value!r}.") from exc
    if not number.is_integer():
        raise ValueError(f"{field} must be a whole number, got {value!r}.")
    return int(number)


def _as_price(value: Any, *, field: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field} must be numeric, got {value!r}.") from exc


@dataclass(frozen=True)
class Product:
    """Catalog product referenced by a line item."""

    product_id: str
    """Backend identifier of the product record."""
    name: str
    """Display name of the product."""
    stock_quantity: int
    """Units in stock; taken as given even when negative."""

    def __post_init__(self) -> None:
        if not isinstance(self.product_id, str) or not self.product_id.strip():
            raise ValueError("Product requires a non-empty product_id.")

    @classmethod
    def from_payload(
        cls, payload: Mapping[str, Any], *, fallback_id: Optional[str] = None
    ) -> "Product":
        if not isinstance(payload, Mapping):
            raise ValueError("Product payload must be a mapping.")
        product_id = _as_text(_pick(payload, ("Id", "id", "product_id"))) or _as_text(fallback_id)
        stock_raw = _pick(payload, ("QuantityInStock__c", "stock_quantity", "quantity_in_stock"))
        return cls(
            product_id=product_id,
            name=_as_text(_pick(payload, ("Name", "name"))),
            stock_quantity=_as_int(stock_raw if stock_raw is not None else 0, field="stock_quantity"),
        )


@dataclass(frozen=True)
class LineItem:
    """Immutable snapshot of one line item as returned by a fetch."""

    line_item_id: str
    quantity: int
    unit_price: float
    total_price: float
    product: Product

    def __post_init__(self) -> None:
        if not isinstance(self.line_item_id, str) or not self.line_item_id.strip():
            raise ValueError("LineItem requires a non-empty line_item_id.")
        if self.quantity < 0:
            raise ValueError("LineItem quantity must be >= 0.")

    @property
    def product_id(self) -> str:
        return self.product.product_id

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "LineItem":
        """Build a line item from a backend record with an embedded product.

        Both the record-store casing (``Id``, ``Quantity``, ``Product2``) and
        snake_case keys are accepted. ``TotalPrice`` falls back to
        ``quantity * unit_price`` when the backend omits it.
        """
        if not isinstance(payload, Mapping):
            raise ValueError("LineItem payload must be a mapping.")

        quantity = _as_int(_pick(payload, ("Quantity", "quantity")), field="quantity")
        unit_price = _as_price(_pick(payload, ("UnitPrice", "unit_price")), field="unit_price")
        total_raw = _pick(payload, ("TotalPrice", "total_price"))
        total_price = (
            _as_price(total_raw, field="total_price")
            if total_raw is not None
            else quantity * unit_price
        )

        product_payload = _pick(payload, ("Product2", "product")) or {}
        product = Product.from_payload(
            product_payload,
            fallback_id=_as_text(_pick(payload, ("Product2Id", "product_id"))),
        )
        return cls(
            line_item_id=_as_text(_pick(payload, ("Id", "id", "line_item_id"))),
            quantity=quantity,
            unit_price=unit_price,
            total_price=total_price,
            product=product,
        )


__all__ = ["LineItem", "Product"]
