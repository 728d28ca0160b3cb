from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from lineview.domain.entities import LineItem
from lineview.domain.invalidation import DEFAULT_PARENT_ID_FIELD
from lineview.domain.ports import ChannelName, ParentId, RecordId, RecordPort
from lineview.domain.settings import DEFAULT_CHANNEL_NAME

from .api_errors import ApiClientError
from .push_mock import PushChannelMock


@dataclass
class RecordsMock(RecordPort):
    """Offline substitute for ``RecordsRestAdapter`` with an in-memory store.

    When a ``push`` channel is attached, every delete publishes an invalidation
    event for the parent record, mirroring the backend trigger.
    """

    elevated: bool = False
    push: Optional[PushChannelMock] = None
    channel_name: ChannelName = DEFAULT_CHANNEL_NAME
    parent_id_field: str = DEFAULT_PARENT_ID_FIELD

    def __post_init__(self) -> None:
        self._items: Dict[ParentId, List[LineItem]] = {}
        self.fetch_calls: List[ParentId] = []
        self.role_calls = 0
        self.delete_calls: List[RecordId] = []

    # ---------- RecordPort ----------

    async def fetch_line_items(self, parent_id: ParentId) -> List[LineItem]:
        self.fetch_calls.append(parent_id)
        return list(self._items.get(parent_id, []))

    async def check_elevated_role(self) -> bool:
        self.role_calls += 1
        return self.elevated

    async def delete_line_item(self, line_item_id: RecordId) -> None:
        self.delete_calls.append(line_item_id)
        for parent_id, items in self._items.items():
            for item in items:
                if item.line_item_id == line_item_id:
                    items.remove(item)
                    await self._notify(parent_id)
                    return
        raise ApiClientError(
            f"delete_line_item[{line_item_id}]: entity is deleted or unknown (HTTP 404)",
            status=404,
            code="ENTITY_IS_DELETED",
            context=f"delete_line_item[{line_item_id}]",
        )

    # ---------- Test helpers ----------

    def add_item(self, parent_id: ParentId, payload: Mapping[str, Any]) -> LineItem:
        item = LineItem.from_payload(payload)
        self._items.setdefault(parent_id, []).append(item)
        return item

    def items_for(self, parent_id: ParentId) -> List[LineItem]:
        return list(self._items.get(parent_id, []))

    async def _notify(self, parent_id: ParentId) -> None:
        if self.push is None:
            return
        await self.push.publish(
            self.channel_name,
            {"data": {"payload": {self.parent_id_field: parent_id}}},
        )
