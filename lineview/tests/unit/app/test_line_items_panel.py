from __future__ import annotations

import asyncio

from lineview.adapters.push_mock import PushChannelMock
from lineview.adapters.records_mock import RecordsMock
from lineview.app.line_items_panel import LineItemsPanel
from lineview.adapters.navigation_log import LoggingNavigator
from lineview.domain.actions import ACTION_DELETE, ACTION_VIEW
from lineview.domain.settings import DEFAULT_CHANNEL_NAME
from lineview.usecases.invalidation_subscriber import SubscriberState
from lineview.viewmodels.line_items_vm import ActionColumn

from ..usecases.fakes import settle


def _event(parent_id: str) -> dict:
    return {"data": {"payload": {"Opportunity_Id_c__c": parent_id}}}


def _build(elevated: bool, push: PushChannelMock | None = None):
    push = push or PushChannelMock()
    records = RecordsMock(elevated=elevated, push=push)
    records.add_item("OPP1", {
        "Id": "LI-1", "Quantity": 5, "UnitPrice": 100.0,
        "Product2": {"Id": "P-1", "Name": "Laptop", "QuantityInStock__c": 3},
    })
    records.add_item("OPP1", {
        "Id": "LI-2", "Quantity": 1, "UnitPrice": 10.0,
        "Product2": {"Id": "P-2", "Name": "Mouse", "QuantityInStock__c": 50},
    })
    navigator = LoggingNavigator()
    snapshots = []
    panel = LineItemsPanel(
        records, push, navigator, parent_id="OPP1", on_rows_changed=snapshots.append
    )
    return panel, records, push, navigator, snapshots


def test_start_loads_rows_and_flags_stock_error() -> None:
    async def scenario():
        panel, records, push, _, snapshots = _build(elevated=True)

        await panel.start()

        assert panel.running
        assert records.fetch_calls == ["OPP1"]
        assert records.role_calls == 1
        assert push.subscribe_calls == [(DEFAULT_CHANNEL_NAME, -1)]
        assert [r.line_item_id for r in panel.rows] == ["LI-1", "LI-2"]
        assert [r.has_stock_error for r in panel.rows] == [True, False]
        assert panel.rows[0].quantity_class == "stock-error"
        assert panel.has_stock_warning
        assert panel.rows[0].actions == (ACTION_DELETE, ACTION_VIEW)
        assert snapshots[-1] == panel.rows

    asyncio.run(scenario())


def test_invalidations_refresh_only_for_bound_parent() -> None:
    async def scenario():
        panel, records, push, _, _ = _build(elevated=False)
        await panel.start()

        await push.publish(DEFAULT_CHANNEL_NAME, _event("OPP1"))
        assert records.fetch_calls == ["OPP1", "OPP1"]

        await push.publish(DEFAULT_CHANNEL_NAME, _event("OPP2"))
        assert records.fetch_calls == ["OPP1", "OPP1"]

    asyncio.run(scenario())


def test_non_elevated_panel_offers_delete_only_and_ignores_view() -> None:
    async def scenario():
        panel, _, _, navigator, _ = _build(elevated=False)
        await panel.start()

        action_column = panel.columns[-1]
        assert isinstance(action_column, ActionColumn)
        assert [a.name for a in action_column.row_actions] == [ACTION_DELETE]
        assert panel.rows[0].actions == (ACTION_DELETE,)

        await panel.handle_row_action(ACTION_VIEW, "LI-1")
        assert navigator.requests == []

    asyncio.run(scenario())


def test_view_action_navigates_to_product() -> None:
    async def scenario():
        panel, _, _, navigator, _ = _build(elevated=True)
        await panel.start()

        await panel.handle_row_action(ACTION_VIEW, "LI-2")

        assert [r.record_id for r in navigator.requests] == ["P-2"]

    asyncio.run(scenario())


def test_delete_removes_row_after_refresh() -> None:
    async def scenario():
        panel, records, _, _, _ = _build(elevated=False)
        await panel.start()

        await panel.handle_row_action(ACTION_DELETE, "LI-1")

        assert records.delete_calls == ["LI-1"]
        assert [r.line_item_id for r in panel.rows] == ["LI-2"]
        assert not panel.has_stock_warning

        await panel.handle_row_action(ACTION_DELETE, "LI-404")
        assert records.delete_calls == ["LI-1"]

    asyncio.run(scenario())


def test_parent_change_shows_loading_then_new_rows() -> None:
    async def scenario():
        panel, records, _, _, snapshots = _build(elevated=False)
        records.add_item("OPP2", {
            "Id": "LI-9", "Quantity": 1, "UnitPrice": 1.0,
            "Product2": {"Id": "P-9", "Name": "Pen", "QuantityInStock__c": 1},
        })
        await panel.start()

        panel.set_parent_id("OPP2")
        assert panel.result.is_loading
        assert snapshots[-1] == []

        await settle()

        assert panel.parent_id == "OPP2"
        assert records.fetch_calls[-1] == "OPP2"
        assert [r.line_item_id for r in panel.rows] == ["LI-9"]

    asyncio.run(scenario())


def test_stop_unsubscribes_and_freezes_rows() -> None:
    async def scenario():
        panel, records, push, _, _ = _build(elevated=True, push=PushChannelMock(fail_unsubscribe=True))
        await panel.start()
        rows_before = panel.rows

        await panel.stop()
        await panel.stop()

        assert not panel.running
        assert panel.subscriber.state is SubscriberState.UNSUBSCRIBED
        assert panel.subscriber.subscription is None

        await panel.refresh()
        await panel.handle_row_action(ACTION_DELETE, "LI-1")
        assert records.fetch_calls == ["OPP1"]
        assert records.delete_calls == []
        assert panel.rows == rows_before

    asyncio.run(scenario())


def test_start_twice_is_ignored() -> None:
    async def scenario():
        panel, records, push, _, _ = _build(elevated=False)
        await panel.start()
        await panel.start()

        assert records.role_calls == 1
        assert len(push.subscribe_calls) == 1

    asyncio.run(scenario())


def test_start_after_stop_never_subscribes() -> None:
    async def scenario():
        panel, records, push, _, _ = _build(elevated=False)

        await panel.stop()
        await panel.start()

        assert not panel.running
        assert push.subscribe_calls == []
        assert push.subscriber_count() == 0
        assert panel.subscriber.state is SubscriberState.UNSUBSCRIBED
        assert records.fetch_calls == []

    asyncio.run(scenario())
