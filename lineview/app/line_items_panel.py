"""Composition of the line-item pipeline for one parent record.

The host calls :meth:`LineItemsPanel.start` when the table is shown and
:meth:`LineItemsPanel.stop` when it goes away. Rows and columns reach the host
through the ``on_rows_changed`` / ``on_columns_changed`` callbacks; row-action
events come back through :meth:`LineItemsPanel.handle_row_action`.

A stopped panel stays stopped. Showing the table again means building a new
panel, which also re-resolves the role flag.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable, List, Optional

from lineview.domain.invalidation import DEFAULT_PARENT_ID_FIELD
from lineview.domain.ports import ChannelName, NavigationPort, PushChannelPort, RecordPort
from lineview.domain.query_result import QueryResult
from lineview.domain.settings import DEFAULT_CHANNEL_NAME
from lineview.usecases.invalidation_subscriber import InvalidationSubscriber
from lineview.usecases.param_store import ParamStore
from lineview.usecases.reactive_query import ReactiveQuery
from lineview.usecases.role_gate import RoleGate
from lineview.usecases.row_actions import RowActionDispatcher
from lineview.viewmodels.labels import Labels
from lineview.viewmodels.line_items_vm import DisplayRow, LineItemsVM

log = logging.getLogger(__name__)


class LineItemsPanel:
    """Reactive line-item table bound to one parent record."""

    def __init__(
        self,
        records: RecordPort,
        push: PushChannelPort,
        navigator: NavigationPort,
        *,
        parent_id: Optional[str] = None,
        channel_name: ChannelName = DEFAULT_CHANNEL_NAME,
        parent_id_field: str = DEFAULT_PARENT_ID_FIELD,
        labels: Optional[Labels] = None,
        on_rows_changed: Optional[Callable[[List[DisplayRow]], None]] = None,
        on_columns_changed: Optional[Callable[[list], None]] = None,
    ) -> None:
        self._started = False
        self._stopped = False

        self.params = ParamStore(parent_id)
        self.vm = LineItemsVM(
            labels=labels or Labels(),
            on_rows_changed=on_rows_changed,
            on_columns_changed=on_columns_changed,
        )
        self.query = ReactiveQuery(records.fetch_line_items, self.params, on_result=self._on_result)
        self.role_gate = RoleGate(records.check_elevated_role, on_resolved=self._on_role_resolved)
        self.subscriber = InvalidationSubscriber(
            push,
            channel_name,
            bound_parent_id=lambda: self.params.value,
            on_invalidate=self.query.refresh,
            parent_id_field=parent_id_field,
        )
        self.dispatcher = RowActionDispatcher(records, self.query, self.role_gate, navigator)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        """Resolve the role, subscribe to invalidations and run the first fetch."""
        if self._stopped:
            log.debug("LineItemsPanel.start() after stop; ignoring")
            return
        if self._started:
            log.debug("LineItemsPanel.start() called twice; ignoring")
            return
        self._started = True
        await asyncio.gather(
            self.role_gate.resolve(),
            self.subscriber.start(),
            self.query.refresh(),
        )

    async def stop(self) -> None:
        """Unsubscribe and stop applying results. In-flight calls are not cancelled."""
        if self._stopped:
            return
        self._stopped = True
        self.query.close()
        await self.subscriber.stop()

    @property
    def running(self) -> bool:
        return self._started and not self._stopped

    # ------------------------------------------------------------------
    # Host surface
    # ------------------------------------------------------------------
    def set_parent_id(self, parent_id: Optional[str]) -> None:
        self.params.set(parent_id)

    @property
    def parent_id(self) -> Optional[str]:
        return self.params.value

    async def refresh(self) -> None:
        await self.query.refresh()

    async def handle_row_action(self, action_id: str, row: Any) -> None:
        if self._stopped:
            log.debug("Row action %r after stop ignored", action_id)
            return
        if isinstance(row, str):
            row = self.row_by_id(row)
            if row is None:
                log.warning("Row action %r for unknown line item", action_id)
                return
        await self.dispatcher.dispatch(action_id, row)

    def row_by_id(self, line_item_id: str) -> Optional[DisplayRow]:
        for row in self.vm.rows:
            if row.line_item_id == line_item_id:
                return row
        return None

    @property
    def result(self) -> QueryResult:
        return self.query.result

    @property
    def rows(self) -> List[DisplayRow]:
        return list(self.vm.rows)

    @property
    def columns(self) -> list:
        return list(self.vm.columns)

    @property
    def is_elevated(self) -> bool:
        return self.role_gate.is_elevated

    @property
    def has_stock_warning(self) -> bool:
        return self.vm.has_stock_warning

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _on_result(self, result: QueryResult) -> None:
        if self._stopped:
            return
        self.vm.apply_result(result)

    def _on_role_resolved(self, elevated: bool) -> None:
        if self._stopped:
            return
        self.vm.apply_role(elevated)


__all__ = ["LineItemsPanel"]
