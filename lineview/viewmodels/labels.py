"""Display labels for the line-item table.

Label lookup (translation bundles, org-specific wording) is done by the host;
these English defaults apply to anything the host does not override.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, Mapping


@dataclass(frozen=True)
class Labels:
    no_products: str = "No products on this record."
    stock_warning: str = "Some quantities exceed the available stock."
    load_error: str = "Line items could not be loaded."
    product_name: str = "Product Name"
    unit_price: str = "Unit Price"
    total_price: str = "Total Price"
    quantity: str = "Quantity"
    stock_quantity: str = "Quantity In Stock"
    delete_action: str = "Delete"
    view_product: str = "View Product"

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any]) -> "Labels":
        """Apply string overrides; unknown keys and blank values are ignored."""
        known = {f.name for f in fields(cls)}
        updates = {
            key: str(value).strip()
            for key, value in (overrides or {}).items()
            if key in known and value is not None and str(value).strip()
        }
        return replace(cls(), **updates)


__all__ = ["Labels"]
