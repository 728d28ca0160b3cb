"""Line-item table projection for the rendering widget.

Call context:
    ``LineItemsPanel`` feeds every new ``QueryResult`` and the resolved role
    flag into :class:`LineItemsVM`, which rebuilds ``DisplayRow`` objects and
    column descriptors and forwards them to the host callbacks. The mapping
    helpers in this module are pure and never touch I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from lineview.domain.actions import ACTION_DELETE, ACTION_VIEW, allowed_actions
from lineview.domain.entities import LineItem, Product
from lineview.domain.query_result import QueryResult
from .labels import Labels

STOCK_ERROR_CLASS = "stock-error"

_ACTION_ICONS: Dict[str, str] = {
    ACTION_DELETE: "utility:delete",
    ACTION_VIEW: "utility:preview",
}


@dataclass(frozen=True)
class DisplayRow:
    """Display row consumed by the line-item table widget."""
    line_item_id: str
    product_id: str
    product_name: str
    unit_price: float
    total_price: float
    quantity: int
    stock_quantity: int
    has_stock_error: bool
    quantity_class: str
    actions: Tuple[str, ...]


@dataclass(frozen=True)
class RowAction:
    name: str
    label: str
    icon_name: str


@dataclass(frozen=True)
class ColumnDescriptor:
    label: str
    field: str
    type: str
    cell_class_field: Optional[str] = None
    """Row field holding the CSS class applied to this column's cells."""

    def to_dict(self) -> dict:
        descriptor: dict = {"label": self.label, "fieldName": self.field, "type": self.type}
        if self.cell_class_field:
            descriptor["cellAttributes"] = {"class": {"fieldName": self.cell_class_field}}
        return descriptor


@dataclass(frozen=True)
class ActionColumn:
    row_actions: Tuple[RowAction, ...]
    type: str = "action"

    def to_dict(self) -> dict:
        return {
            "type": self.type,
            "typeAttributes": {
                "rowActions": [
                    {"label": a.label, "name": a.name, "iconName": a.icon_name}
                    for a in self.row_actions
                ]
            },
        }


# ----------------------------------------------------------------------
# Pure mapping helpers
# ----------------------------------------------------------------------
def has_stock_error(quantity: int, stock_quantity: int) -> bool:
    """True when more units are ordered than the product has in stock."""
    return quantity > stock_quantity


def to_display_row(
    item: LineItem, product: Optional[Product] = None, elevated: bool = False
) -> DisplayRow:
    """Project a line item and its product into a fresh display row."""
    product = product or item.product
    stock_error = has_stock_error(item.quantity, product.stock_quantity)
    return DisplayRow(
        line_item_id=item.line_item_id,
        product_id=product.product_id,
        product_name=product.name,
        unit_price=item.unit_price,
        total_price=item.total_price,
        quantity=item.quantity,
        stock_quantity=product.stock_quantity,
        has_stock_error=stock_error,
        quantity_class=STOCK_ERROR_CLASS if stock_error else "",
        actions=allowed_actions(elevated),
    )


def to_display_rows(items: Iterable[LineItem], elevated: bool = False) -> List[DisplayRow]:
    return [to_display_row(item, elevated=elevated) for item in items]


def available_actions(elevated: bool, labels: Optional[Labels] = None) -> Tuple[RowAction, ...]:
    labels = labels or Labels()
    names = {ACTION_DELETE: labels.delete_action, ACTION_VIEW: labels.view_product}
    return tuple(
        RowAction(name=action, label=names[action], icon_name=_ACTION_ICONS[action])
        for action in allowed_actions(elevated)
    )


def build_columns(
    labels: Optional[Labels] = None, elevated: bool = False
) -> List[ColumnDescriptor | ActionColumn]:
    """Return column descriptors in display order with a trailing action column."""
    labels = labels or Labels()
    return [
        ColumnDescriptor(labels.product_name, "product_name", "text"),
        ColumnDescriptor(labels.unit_price, "unit_price", "currency"),
        ColumnDescriptor(labels.total_price, "total_price", "currency"),
        ColumnDescriptor(labels.quantity, "quantity", "number", cell_class_field="quantity_class"),
        ColumnDescriptor(
            labels.stock_quantity, "stock_quantity", "number", cell_class_field="quantity_class"
        ),
        ActionColumn(row_actions=available_actions(elevated, labels)),
    ]


def has_rows(rows: Sequence[DisplayRow]) -> bool:
    return len(rows) > 0


def has_stock_warning(rows: Iterable[DisplayRow]) -> bool:
    return any(row.has_stock_error for row in rows)


# ----------------------------------------------------------------------
# View model
# ----------------------------------------------------------------------
@dataclass
class LineItemsVM:
    """Holds the rows, columns and status messages of one line-item table."""

    labels: Labels = field(default_factory=Labels)
    on_rows_changed: Optional[Callable[[List[DisplayRow]], None]] = None
    on_columns_changed: Optional[Callable[[List[ColumnDescriptor | ActionColumn]], None]] = None

    rows: List[DisplayRow] = field(default_factory=list)
    elevated: bool = False
    last_result: QueryResult = field(default_factory=QueryResult.loading)

    def __post_init__(self) -> None:
        self.columns = build_columns(self.labels, self.elevated)

    def apply_result(self, result: QueryResult) -> None:
        """Rebuild all rows from ``result``; failures and loading clear them."""
        if not isinstance(result, QueryResult):
            raise TypeError("LineItemsVM.apply_result requires a QueryResult.")
        self.last_result = result
        self._rebuild_rows()

    def apply_role(self, elevated: bool) -> None:
        self.elevated = bool(elevated)
        self.columns = build_columns(self.labels, self.elevated)
        if self.on_columns_changed:
            self.on_columns_changed(list(self.columns))
        self._rebuild_rows()

    @property
    def is_loading(self) -> bool:
        return self.last_result.is_loading

    @property
    def has_rows(self) -> bool:
        return has_rows(self.rows)

    @property
    def has_stock_warning(self) -> bool:
        return has_stock_warning(self.rows)

    @property
    def empty_message(self) -> str:
        if self.last_result.is_success and not self.rows:
            return self.labels.no_products
        return ""

    @property
    def warning_message(self) -> str:
        return self.labels.stock_warning if self.has_stock_warning else ""

    @property
    def error_message(self) -> str:
        if self.last_result.is_failure:
            return self.labels.load_error
        return ""

    def _rebuild_rows(self) -> None:
        result = self.last_result
        self.rows = to_display_rows(result.items, self.elevated) if result.is_success else []
        if self.on_rows_changed:
            self.on_rows_changed(list(self.rows))


__all__ = [
    "ActionColumn",
    "ColumnDescriptor",
    "DisplayRow",
    "LineItemsVM",
    "RowAction",
    "STOCK_ERROR_CLASS",
    "available_actions",
    "build_columns",
    "has_rows",
    "has_stock_error",
    "has_stock_warning",
    "to_display_row",
    "to_display_rows",
]
