"""Server-Sent Events push channel for line-item invalidations.

Overview
--------
``subscribe`` opens a streaming GET against the configured stream URL and only
returns once the server accepted the stream (2xx). Each ``data:`` block is
decoded as JSON and handed to the subscriber callback from a background task.
Connection loss or a server-side close is reported to the error listeners; the
channel does not reconnect on its own.

Request shape::

    GET <stream_url>?channel=<name>&replay=<replay_id>
    Accept: text/event-stream
"""

from __future__ import annotations

import asyncio
import contextlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional

import httpx

from lineview.domain.ports import ChannelName, ErrorListener, MessageCallback, PushChannelPort

from .api_errors import ApiError, ApiTimeoutError, parse_error_payload, raise_for_response

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SseEvent:
    event: str
    data: str
    event_id: Optional[str] = None


class SseParser:
    """Incremental parser: feed one line at a time, get events on blank lines."""

    def __init__(self) -> None:
        self._event: Optional[str] = None
        self._event_id: Optional[str] = None
        self._data_lines: List[str] = []

    def feed(self, line: Optional[str]) -> Optional[SseEvent]:
        if line is None:
            return None
        line = line.rstrip("\r\n")
        if line == "":
            return self._dispatch()
        if line.startswith(":"):
            return None  # comment / keep-alive
        name, _, value = line.partition(":")
        if value.startswith(" "):
            value = value[1:]
        if name == "event":
            self._event = value.strip()
        elif name == "data":
            self._data_lines.append(value)
        elif name == "id":
            self._event_id = value.strip() or None
        return None

    def _dispatch(self) -> Optional[SseEvent]:
        if not self._data_lines:
            self._event = None
            return None
        event = SseEvent(
            event=self._event or "message",
            data="\n".join(self._data_lines),
            event_id=self._event_id,
        )
        self._event = None
        self._data_lines = []
        return event


@dataclass
class SseSubscription:
    """Handle for one live stream; released by ``SsePushChannel.unsubscribe``."""

    channel: ChannelName
    sub_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    task: Optional[asyncio.Task] = None
    last_event_id: Optional[str] = None


class SsePushChannel(PushChannelPort):
    """Push channel backed by an SSE endpoint reached through ``httpx``."""

    def __init__(
        self,
        stream_url: str,
        *,
        api_key: Optional[str] = None,
        connect_timeout_s: int = 10,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not stream_url:
            raise ValueError("SsePushChannel requires a stream URL")
        self.stream_url = stream_url.rstrip("/")
        self.api_key = api_key or None
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(connect_timeout_s, read=None)
        )
        self._error_listeners: List[ErrorListener] = []

    def _headers(self) -> dict:
        headers = {"Accept": "text/event-stream"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    # ---------- PushChannelPort ----------

    async def subscribe(
        self, channel: ChannelName, replay_id: int, callback: MessageCallback
    ) -> SseSubscription:
        ctx = f"subscribe[{channel}]"
        request = self._client.build_request(
            "GET",
            self.stream_url,
            params={"channel": channel, "replay": replay_id},
            headers=self._headers(),
        )
        try:
            response = await self._client.send(request, stream=True)
        except httpx.TimeoutException as exc:
            raise ApiTimeoutError(f"Timeout contacting {self.stream_url}", context=ctx) from exc
        except httpx.HTTPError as exc:
            raise ApiError(f"{ctx}: {exc}", context=ctx) from exc

        if not 200 <= response.status_code < 300:
            await response.aread()
            payload = parse_error_payload(response)
            await response.aclose()
            raise_for_response(response.status_code, payload, ctx)

        handle = SseSubscription(channel=channel)
        handle.task = asyncio.create_task(
            self._pump(handle, response, callback), name=f"sse-{channel}"
        )
        return handle

    async def unsubscribe(self, handle: Any) -> None:
        if not isinstance(handle, SseSubscription) or handle.task is None:
            return
        task, handle.task = handle.task, None
        if task.done():
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    def on_error(self, listener: ErrorListener) -> Callable[[], None]:
        self._error_listeners.append(listener)

        def _remove() -> None:
            if listener in self._error_listeners:
                self._error_listeners.remove(listener)

        return _remove

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _pump(
        self, handle: SseSubscription, response: httpx.Response, callback: MessageCallback
    ) -> None:
        parser = SseParser()
        ctx = f"stream[{handle.channel}]"
        try:
            async for line in response.aiter_lines():
                event = parser.feed(line)
                if event is None:
                    continue
                if event.event_id:
                    handle.last_event_id = event.event_id
                try:
                    payload = json.loads(event.data)
                except json.JSONDecodeError:
                    log.debug("%s: dropping non-JSON event %r", ctx, event.data[:200])
                    continue
                if not isinstance(payload, dict):
                    continue
                try:
                    await callback(payload)
                except Exception as exc:
                    log.error("%s: subscriber callback failed: %s", ctx, exc)
            self._emit_error(ApiError(f"{ctx}: stream closed by server", context=ctx))
        except httpx.HTTPError as exc:
            self._emit_error(ApiError(f"{ctx}: {exc}", context=ctx))
        finally:
            await response.aclose()

    def _emit_error(self, error: ApiError) -> None:
        for listener in list(self._error_listeners):
            try:
                listener(error)
            except Exception as exc:
                log.error("push channel error listener failed: %s", exc)


__all__ = ["SseEvent", "SseParser", "SsePushChannel", "SseSubscription"]
