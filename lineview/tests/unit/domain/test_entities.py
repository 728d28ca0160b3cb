from __future__ import annotations

import pytest

from lineview.domain.entities import LineItem, Product


def _payload(**overrides):
    base = {
        "Id": "LI-1",
        "Quantity": 5,
        "UnitPrice": 10.0,
        "TotalPrice": 50.0,
        "Product2Id": "P-1",
        "Product2": {"Id": "P-1", "Name": "Widget", "QuantityInStock__c": 3},
    }
    base.update(overrides)
    return base


def test_from_payload_reads_record_store_keys() -> None:
    item = LineItem.from_payload(_payload())

    assert item.line_item_id == "LI-1"
    assert item.quantity == 5
    assert item.unit_price == pytest.approx(10.0)
    assert item.total_price == pytest.approx(50.0)
    assert item.product == Product(product_id="P-1", name="Widget", stock_quantity=3)
    assert item.product_id == "P-1"


def test_from_payload_accepts_snake_case_and_computes_total() -> None:
    item = LineItem.from_payload(
        {
            "id": "LI-2",
            "quantity": "4",
            "unit_price": "2.5",
            "product": {"id": "P-2", "name": "Bolt", "stock_quantity": 100},
        }
    )

    assert item.quantity == 4
    assert item.total_price == pytest.approx(10.0)
    assert item.product.name == "Bolt"


def test_product_id_falls_back_to_lookup_field() -> None:
    item = LineItem.from_payload(_payload(Product2={"Name": "Widget", "QuantityInStock__c": 1}))
    assert item.product_id == "P-1"


def test_negative_stock_is_kept_as_given() -> None:
    item = LineItem.from_payload(_payload(Product2={"Id": "P-1", "Name": "W", "QuantityInStock__c": -2}))
    assert item.product.stock_quantity == -2


@pytest.mark.parametrize(
    "overrides",
    [
        {"Quantity": -1},
        {"Quantity": 1.5},
        {"Quantity": "many"},
        {"UnitPrice": None},
        {"Id": ""},
    ],
)
def test_from_payload_rejects_invalid_records(overrides) -> None:
    with pytest.raises(ValueError):
        LineItem.from_payload(_payload(**overrides))
