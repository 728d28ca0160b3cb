"""REST implementation of ``RecordPort``.

Endpoints (relative to ``SettingsConfig.api_base_url``)::

    GET    /line-items?parentId=<id>
    GET    /role/elevated
    DELETE /line-items/<id>

Call context:
    Built by ``AppController.ensure_ready``; called from ``ReactiveQuery``,
    ``RoleGate`` and ``RowActionDispatcher`` on the event loop.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, List, Optional
from urllib.parse import quote

import requests

from lineview.domain.entities import LineItem
from lineview.domain.ports import ParentId, RecordId, RecordPort

from .api_errors import ApiError, parse_error_payload, raise_for_response
from .http_client import HttpConfig, RetryingSession

log = logging.getLogger(__name__)


class RecordsRestAdapter(RecordPort):
    """REST adapter for line-item queries, the role check and deletes.

    ``requests`` is blocking, so every call is pushed to a worker thread with
    ``asyncio.to_thread`` and the event loop stays responsive.
    """

    def __init__(
        self,
        base_url: str,
        *,
        api_key: Optional[str] = None,
        request_timeout_s: int = 10,
        retries: int = 0,
    ) -> None:
        if not base_url:
            raise ValueError("RecordsRestAdapter requires a base URL")
        self.base_url = base_url.rstrip("/")
        self.cfg = HttpConfig(request_timeout_s=request_timeout_s, retries=retries)
        self.session = RetryingSession(api_key or None, self.cfg)

    # ---------- RecordPort ----------

    async def fetch_line_items(self, parent_id: ParentId) -> List[LineItem]:
        return await asyncio.to_thread(self._fetch_line_items, parent_id)

    async def check_elevated_role(self) -> bool:
        return await asyncio.to_thread(self._check_elevated_role)

    async def delete_line_item(self, line_item_id: RecordId) -> None:
        await asyncio.to_thread(self._delete_line_item, line_item_id)

    def close(self) -> None:
        self.session.close()

    # ------------------------------------------------------------------
    # Blocking implementations
    # ------------------------------------------------------------------
    def _fetch_line_items(self, parent_id: ParentId) -> List[LineItem]:
        ctx = f"line_items[{parent_id}]"
        resp = self.session.get(self._make_url("/line-items"), params={"parentId": parent_id})
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp)
        if isinstance(data, dict):
            data = data.get("records", data.get("items"))
        if not isinstance(data, list):
            raise ApiError(f"{ctx}: expected list response", context=ctx)
        items: List[LineItem] = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                items.append(LineItem.from_payload(entry))
            except ValueError as exc:
                raise ApiError(f"{ctx}: malformed line item: {exc}", payload=entry, context=ctx) from exc
        log.debug("Fetched %d line items for %s", len(items), parent_id)
        return items

    def _check_elevated_role(self) -> bool:
        ctx = "role_check"
        resp = self.session.get(self._make_url("/role/elevated"))
        self._ensure_ok(resp, ctx)
        data = self._json_any(resp)
        if isinstance(data, dict):
            data = data.get("elevated")
        if not isinstance(data, bool):
            raise ApiError(f"{ctx}: expected boolean response", payload=data, context=ctx)
        return data

    def _delete_line_item(self, line_item_id: RecordId) -> None:
        ctx = f"delete_line_item[{line_item_id}]"
        resp = self.session.delete(self._make_url(f"/line-items/{quote(str(line_item_id), safe='')}"))
        self._ensure_ok(resp, ctx)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------
    def _make_url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    @staticmethod
    def _ensure_ok(resp: requests.Response, ctx: str) -> None:
        if 200 <= resp.status_code < 300:
            return
        raise_for_response(resp.status_code, parse_error_payload(resp), ctx)

    @staticmethod
    def _json_any(resp: requests.Response) -> Any:
        try:
            return resp.json()
        except Exception:
            snippet = getattr(resp, "text", "")[:400]
            raise ApiError(f"Invalid JSON response: {snippet}")


__all__ = ["RecordsRestAdapter"]
