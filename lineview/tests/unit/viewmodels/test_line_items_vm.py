from __future__ import annotations

import itertools

from lineview.domain.entities import LineItem, Product
from lineview.domain.errors import QueryError
from lineview.domain.query_result import QueryResult
from lineview.viewmodels.labels import Labels
from lineview.viewmodels.line_items_vm import (
    ActionColumn,
    ColumnDescriptor,
    LineItemsVM,
    STOCK_ERROR_CLASS,
    available_actions,
    build_columns,
    has_stock_error,
    has_stock_warning,
    to_display_row,
)


def _item(line_id: str = "LI-1", *, qty: int = 5, stock: int = 3) -> LineItem:
    return LineItem(
        line_item_id=line_id,
        quantity=qty,
        unit_price=10.0,
        total_price=10.0 * qty,
        product=Product(product_id=f"P-{line_id}", name=f"Product {line_id}", stock_quantity=stock),
    )


def test_stock_error_matches_subtraction_form() -> None:
    for qty, stock in itertools.product(range(0, 6), range(-2, 6)):
        row = to_display_row(_item(qty=qty, stock=stock))
        assert row.has_stock_error == (qty > stock)
        assert has_stock_error(qty, stock) == (stock - qty < 0)


def test_scenario_quantity_above_stock_flags_row_and_list() -> None:
    row = to_display_row(_item(qty=5, stock=3))

    assert row.has_stock_error is True
    assert row.quantity_class == STOCK_ERROR_CLASS
    assert row.product_name == "Product LI-1"
    assert row.stock_quantity == 3
    assert has_stock_warning([row]) is True


def test_row_within_stock_has_no_styling() -> None:
    row = to_display_row(_item(qty=3, stock=3))
    assert row.has_stock_error is False
    assert row.quantity_class == ""
    assert has_stock_warning([row]) is False


def test_actions_follow_role_flag() -> None:
    assert [a.name for a in available_actions(False)] == ["delete"]
    assert [a.name for a in available_actions(True)] == ["delete", "view"]
    assert to_display_row(_item(), elevated=False).actions == ("delete",)
    assert to_display_row(_item(), elevated=True).actions == ("delete", "view")


def test_build_columns_orders_fields_and_ends_with_actions() -> None:
    labels = Labels.from_mapping({"product_name": "Produit", "unknown": "x", "quantity": "  "})
    columns = build_columns(labels, elevated=False)

    data_columns = [c for c in columns if isinstance(c, ColumnDescriptor)]
    assert [c.field for c in data_columns] == [
        "product_name",
        "unit_price",
        "total_price",
        "quantity",
        "stock_quantity",
    ]
    assert data_columns[0].label == "Produit"
    assert data_columns[3].label == "Quantity"
    assert data_columns[3].to_dict()["cellAttributes"] == {"class": {"fieldName": "quantity_class"}}
    assert "cellAttributes" not in data_columns[0].to_dict()

    action_column = columns[-1]
    assert isinstance(action_column, ActionColumn)
    assert action_column.to_dict()["typeAttributes"]["rowActions"] == [
        {"label": "Delete", "name": "delete", "iconName": "utility:delete"}
    ]


def test_vm_rebuilds_rows_on_every_result() -> None:
    updates = []
    vm = LineItemsVM(on_rows_changed=updates.append)

    vm.apply_result(QueryResult.success([_item("LI-1"), _item("LI-2", qty=1)]))
    first_rows = vm.rows
    vm.apply_result(QueryResult.success([_item("LI-2", qty=1)]))

    assert [r.line_item_id for r in vm.rows] == ["LI-2"]
    assert vm.rows[0] is not first_rows[1]
    assert len(updates) == 2
    assert vm.has_stock_warning is False
    assert vm.warning_message == ""


def test_vm_messages_for_empty_and_failed_results() -> None:
    vm = LineItemsVM()
    assert vm.is_loading
    assert vm.empty_message == ""

    vm.apply_result(QueryResult.success([]))
    assert vm.empty_message == Labels().no_products
    assert not vm.has_rows

    vm.apply_result(QueryResult.failure(QueryError("QUERY_FAILED", "down")))
    assert vm.rows == []
    assert vm.error_message == Labels().load_error
    assert vm.empty_message == ""


def test_vm_apply_role_rebuilds_columns_and_rows() -> None:
    column_updates = []
    vm = LineItemsVM(on_columns_changed=column_updates.append)
    vm.apply_result(QueryResult.success([_item()]))

    vm.apply_role(True)

    assert vm.rows[0].actions == ("delete", "view")
    assert len(column_updates) == 1
    action_names = [a.name for a in column_updates[0][-1].row_actions]
    assert action_names == ["delete", "view"]
    assert vm.has_stock_warning
    assert vm.warning_message == Labels().stock_warning
