from __future__ import annotations

import pytest

from lineview.domain.errors import QueryError
from lineview.domain.invalidation import InvalidationMessage
from lineview.domain.navigation import NavigationRequest
from lineview.domain.query_result import QueryResult


def test_from_event_reads_platform_event_envelope() -> None:
    event = {"channel": "/event/x", "data": {"payload": {"Opportunity_Id_c__c": "OPP1"}}}

    message = InvalidationMessage.from_event(event)

    assert message is not None
    assert message.parent_id == "OPP1"
    assert message.concerns("OPP1")
    assert not message.concerns("OPP2")
    assert not message.concerns(None)


def test_from_event_supports_flat_payloads_and_custom_field() -> None:
    assert InvalidationMessage.from_event({"payload": {"parent": "A"}}, parent_id_field="parent").parent_id == "A"
    assert InvalidationMessage.from_event({"parent": "B"}, parent_id_field="parent").parent_id == "B"


@pytest.mark.parametrize(
    "event",
    [
        {},
        {"data": {"payload": {}}},
        {"data": {"payload": {"Opportunity_Id_c__c": "  "}}},
        "not-a-mapping",
    ],
)
def test_from_event_without_parent_id_returns_none(event) -> None:
    assert InvalidationMessage.from_event(event) is None


def test_navigation_request_shape() -> None:
    assert NavigationRequest(record_id="P-1").to_dict() == {
        "targetType": "recordDetail",
        "recordId": "P-1",
        "entityType": "Product",
        "intent": "view",
    }
    with pytest.raises(ValueError):
        NavigationRequest(record_id="")


def test_query_result_variants_are_exclusive() -> None:
    assert QueryResult.loading().is_loading
    assert QueryResult.success([]).is_success
    failure = QueryResult.failure(QueryError("QUERY_FAILED", "boom"))
    assert failure.is_failure and failure.items == ()

    with pytest.raises(ValueError):
        QueryResult(status="failure")
    with pytest.raises(ValueError):
        QueryResult(status="success", error=QueryError("X", "y"))
