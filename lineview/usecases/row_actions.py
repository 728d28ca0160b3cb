"""Row-action dispatch for the line-item table.

Call context:
    ``LineItemsPanel.handle_row_action`` forwards table events here. A delete
    goes through ``RecordPort.delete_line_item`` and then refreshes the
    ``ReactiveQuery``; a view hands a ``NavigationRequest`` to the
    ``NavigationPort``. Failures are mapped to ``MutationError`` and logged.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Optional

from lineview.domain.actions import ACTION_DELETE, ACTION_VIEW, allowed_actions
from lineview.domain.errors import MutationError
from lineview.domain.navigation import NavigationRequest
from lineview.domain.ports import NavigationPort, RecordPort
from lineview.usecases.error_mapping import map_api_error
from lineview.usecases.reactive_query import ReactiveQuery
from lineview.usecases.role_gate import RoleGate

log = logging.getLogger(__name__)


def _row_field(row: Any, name: str) -> Optional[str]:
    """Read ``name`` from a display row object or a plain mapping."""
    value = row.get(name) if isinstance(row, dict) else getattr(row, name, None)
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class RowActionDispatcher:
    """Turn a row-action event into its effect.

    ``delete`` removes the line item remotely and then refreshes the query;
    ``view`` opens the product detail page and is honored only for the
    elevated role, whatever the rendering layer offered.
    """

    def __init__(
        self,
        records: RecordPort,
        query: ReactiveQuery,
        role_gate: RoleGate,
        navigator: NavigationPort,
        *,
        on_error: Optional[Callable[[MutationError], None]] = None,
    ) -> None:
        self.records = records
        self.query = query
        self.role_gate = role_gate
        self.navigator = navigator
        self.on_error = on_error
        self.last_error: Optional[MutationError] = None

    async def dispatch(self, action_id: str, row: Any) -> None:
        action = str(action_id or "").strip()
        if action not in allowed_actions(self.role_gate.is_elevated):
            log.warning("Row action %r is not available; ignoring", action)
            return
        handler = self._handlers().get(action)
        if handler is None:
            log.warning("No handler for row action %r", action)
            return
        await handler(row)

    def _handlers(self) -> dict[str, Callable[[Any], Awaitable[None]]]:
        return {ACTION_DELETE: self._delete, ACTION_VIEW: self._view}

    async def _delete(self, row: Any) -> None:
        line_item_id = _row_field(row, "line_item_id")
        if not line_item_id:
            log.warning("Delete requested for a row without line_item_id")
            return
        try:
            await self.records.delete_line_item(line_item_id)
        except Exception as exc:
            self.last_error = map_api_error(
                exc,
                MutationError,
                default_code="DELETE_FAILED",
                default_message="Failed to delete line item.",
            )
            log.error("Deleting line item %s failed [%s]: %s", line_item_id, self.last_error.code, self.last_error.message)
            if self.on_error is not None:
                try:
                    self.on_error(self.last_error)
                except Exception as hook_exc:
                    log.error("Delete error hook failed: %s", hook_exc)
            return
        log.info("Deleted line item %s", line_item_id)
        await self.query.refresh()

    async def _view(self, row: Any) -> None:
        # Re-checked here as well: the action list may have been rendered by a
        # host that ignores the gate.
        if not self.role_gate.is_elevated:
            log.warning("Product navigation refused: elevated role required")
            return
        product_id = _row_field(row, "product_id")
        if not product_id:
            log.warning("Navigation requested for a row without product_id")
            return
        try:
            await self.navigator.navigate(NavigationRequest(record_id=product_id))
        except Exception as exc:
            log.error("Navigation to product %s failed: %s", product_id, exc)


__all__ = ["RowActionDispatcher"]
