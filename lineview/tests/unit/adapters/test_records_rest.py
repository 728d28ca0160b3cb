from __future__ import annotations

import asyncio
from typing import Any, Dict, List, Optional, Sequence

import pytest

from lineview.adapters.api_errors import ApiClientError, ApiError, ApiServerError
from lineview.adapters.records_rest import RecordsRestAdapter


class _ResponseStub:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self._payload = payload
        self.status_code = status_code
        self.text = str(payload)

    def json(self) -> Any:
        return self._payload


class _SessionStub:
    def __init__(self, responses: Sequence[_ResponseStub]) -> None:
        self._responses = list(responses)
        self.calls: List[Dict[str, Any]] = []

    def _next(self, method: str, url: str, **kwargs: Any) -> _ResponseStub:
        self.calls.append({"method": method, "url": url, **kwargs})
        if not self._responses:
            raise RuntimeError("No stub response configured")
        return self._responses.pop(0)

    def get(self, url: str, *, params: Optional[Dict[str, Any]] = None, timeout: Optional[int] = None):
        return self._next("GET", url, params=params)

    def delete(self, url: str, *, timeout: Optional[int] = None):
        return self._next("DELETE", url)

    def close(self) -> None:
        pass


def _adapter(*responses: _ResponseStub) -> tuple[RecordsRestAdapter, _SessionStub]:
    adapter = RecordsRestAdapter("http://crm.local/api/", api_key="secret")
    stub = _SessionStub(responses)
    adapter.session = stub  # type: ignore[assignment]
    return adapter, stub


def test_fetch_line_items_parses_records_envelope() -> None:
    payload = {
        "records": [
            {
                "Id": "LI-1",
                "Quantity": 5,
                "UnitPrice": 2.5,
                "TotalPrice": 12.5,
                "Product2": {"Id": "P-1", "Name": "Widget", "QuantityInStock__c": 3},
            },
            "ignore-me",
        ]
    }
    adapter, stub = _adapter(_ResponseStub(payload))

    items = asyncio.run(adapter.fetch_line_items("OPP1"))

    assert stub.calls[0]["url"] == "http://crm.local/api/line-items"
    assert stub.calls[0]["params"] == {"parentId": "OPP1"}
    assert len(items) == 1
    assert items[0].line_item_id == "LI-1"
    assert items[0].product.stock_quantity == 3


def test_fetch_line_items_maps_server_error() -> None:
    adapter, _ = _adapter(_ResponseStub({"message": "database offline"}, status_code=503))

    with pytest.raises(ApiServerError) as excinfo:
        asyncio.run(adapter.fetch_line_items("OPP1"))

    assert "database offline" in str(excinfo.value)


def test_fetch_line_items_rejects_non_list_body() -> None:
    adapter, _ = _adapter(_ResponseStub({"unexpected": True}))

    with pytest.raises(ApiError):
        asyncio.run(adapter.fetch_line_items("OPP1"))


@pytest.mark.parametrize("payload, expected", [({"elevated": True}, True), (False, False)])
def test_check_elevated_role(payload, expected) -> None:
    adapter, stub = _adapter(_ResponseStub(payload))

    assert asyncio.run(adapter.check_elevated_role()) is expected
    assert stub.calls[0]["url"] == "http://crm.local/api/role/elevated"


def test_check_elevated_role_rejects_non_boolean() -> None:
    adapter, _ = _adapter(_ResponseStub({"elevated": "yes"}))

    with pytest.raises(ApiError):
        asyncio.run(adapter.check_elevated_role())


def test_delete_line_item_quotes_id_and_maps_not_found() -> None:
    body = [{"errorCode": "ENTITY_IS_DELETED", "message": "entity is deleted"}]
    adapter, stub = _adapter(_ResponseStub(None, status_code=204), _ResponseStub(body, status_code=404))

    asyncio.run(adapter.delete_line_item("LI 1"))
    assert stub.calls[0] == {"method": "DELETE", "url": "http://crm.local/api/line-items/LI%201"}

    with pytest.raises(ApiClientError) as excinfo:
        asyncio.run(adapter.delete_line_item("LI-2"))
    assert excinfo.value.status == 404
    assert excinfo.value.code == "ENTITY_IS_DELETED"


def test_adapter_requires_base_url() -> None:
    with pytest.raises(ValueError):
        RecordsRestAdapter("")
