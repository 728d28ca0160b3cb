"""Owner of the current line-item query result.

Call context:
    ``LineItemsPanel`` creates one query per panel. The invalidation
    subscriber, the row-action dispatcher and parameter changes all funnel
    into :meth:`ReactiveQuery.refresh`.

Ordering:
    Refreshes are single-flight. While a fetch is running, further requests
    are coalesced into one trailing fetch that starts after the running one
    finishes, so results are applied in request order and an older response
    can never overwrite a newer one.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Sequence, Set

from lineview.domain.entities import LineItem
from lineview.domain.errors import QueryError
from lineview.domain.ports import ParentId
from lineview.domain.query_result import QueryResult
from lineview.usecases.error_mapping import map_api_error
from lineview.usecases.param_store import ParamStore

log = logging.getLogger(__name__)

FetchFn = Callable[[ParentId], Awaitable[Sequence[LineItem]]]
ResultHook = Callable[[QueryResult], None]


class ReactiveQuery:
    """Re-executable query bound to a parent identifier held in a ``ParamStore``."""

    def __init__(
        self,
        fetch: FetchFn,
        params: ParamStore,
        *,
        on_result: Optional[ResultHook] = None,
    ) -> None:
        self._fetch = fetch
        self.params = params
        self.on_result = on_result
        self._result = QueryResult.loading()
        self._inflight: Optional[asyncio.Task] = None
        self._rerun = False
        self._closed = False
        self._background: Set[asyncio.Task] = set()
        self._unbind = params.subscribe(self._on_param_changed)

    @property
    def result(self) -> QueryResult:
        return self._result

    @property
    def is_refreshing(self) -> bool:
        return self._inflight is not None

    @property
    def closed(self) -> bool:
        return self._closed

    async def refresh(self) -> None:
        """Re-run the query and replace the stored result.

        Never raises for query failures; those become ``QueryResult.failure``.
        Returns once a fetch that started after this call has been applied.
        """
        if self._closed:
            return
        if self._inflight is None:
            self._inflight = asyncio.create_task(self._run_cycle())
        else:
            self._rerun = True
        await asyncio.shield(self._inflight)

    def close(self) -> None:
        """Detach: later completions are discarded and refresh becomes a no-op."""
        if self._closed:
            return
        self._closed = True
        self._unbind()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _run_cycle(self) -> None:
        try:
            while True:
                self._rerun = False
                await self._execute()
                if not self._rerun or self._closed:
                    break
        finally:
            self._inflight = None

    async def _execute(self) -> None:
        parent_id = self.params.value
        if not parent_id:
            log.debug("Skipping line item query: no parent record bound")
            return

        try:
            items = await self._fetch(parent_id)
            result = QueryResult.success(items)
        except Exception as exc:
            error = map_api_error(
                exc,
                QueryError,
                default_code="QUERY_FAILED",
                default_message="Failed to load line items.",
            )
            log.error("Line item query for %s failed [%s]: %s", parent_id, error.code, error.message)
            result = QueryResult.failure(error)

        if self._closed:
            log.debug("Discarding line item result for %s: query closed", parent_id)
            return
        if parent_id != self.params.value:
            # The bound record changed mid-flight; the trailing fetch covers it.
            return
        self._apply(result)

    def _apply(self, result: QueryResult) -> None:
        self._result = result
        if self.on_result is None:
            return
        try:
            self.on_result(result)
        except Exception as exc:
            log.error("Query result hook failed: %s", exc)

    def _on_param_changed(self, value: Optional[str]) -> None:
        if self._closed:
            return
        if value is None:
            # Unbound: nothing to fetch, so the table is empty.
            self._apply(QueryResult.success(()))
            return
        self._apply(QueryResult.loading())
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.debug("Parent record set outside the event loop; fetch deferred to start")
            return
        task = loop.create_task(self.refresh())
        self._background.add(task)
        task.add_done_callback(self._background.discard)


__all__ = ["ReactiveQuery"]
