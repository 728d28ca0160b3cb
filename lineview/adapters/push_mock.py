from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Mapping, Optional
from uuid import uuid4

from lineview.domain.ports import ChannelName, ErrorListener, MessageCallback, PushChannelPort

from .api_errors import ApiError

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MockSubscription:
    channel: ChannelName
    sub_id: str


@dataclass
class PushChannelMock(PushChannelPort):
    """In-memory push channel used for tests and offline development.

    Only events published after a subscription exists are delivered, which
    matches the "new messages only" replay position.
    """

    fail_subscribe: bool = False
    fail_unsubscribe: bool = False

    def __post_init__(self) -> None:
        self._subscribers: Dict[str, tuple[ChannelName, MessageCallback]] = {}
        self._error_listeners: List[ErrorListener] = []
        self.subscribe_calls: List[tuple[ChannelName, int]] = []
        self.unsubscribe_calls: List[Any] = []

    # ---------- PushChannelPort ----------

    async def subscribe(
        self, channel: ChannelName, replay_id: int, callback: MessageCallback
    ) -> MockSubscription:
        self.subscribe_calls.append((channel, replay_id))
        if self.fail_subscribe:
            raise ApiError(f"subscribe[{channel}]: channel unavailable", context="subscribe")
        handle = MockSubscription(channel=channel, sub_id=str(uuid4()))
        self._subscribers[handle.sub_id] = (channel, callback)
        return handle

    async def unsubscribe(self, handle: Any) -> None:
        self.unsubscribe_calls.append(handle)
        if self.fail_unsubscribe:
            raise ApiError("unsubscribe: channel unavailable", context="unsubscribe")
        if isinstance(handle, MockSubscription):
            self._subscribers.pop(handle.sub_id, None)

    def on_error(self, listener: ErrorListener) -> Callable[[], None]:
        self._error_listeners.append(listener)

        def _remove() -> None:
            if listener in self._error_listeners:
                self._error_listeners.remove(listener)

        return _remove

    # ---------- Test helpers ----------

    async def publish(self, channel: ChannelName, event: Mapping[str, Any]) -> int:
        """Deliver ``event`` to every subscriber of ``channel``; returns the count."""
        targets = [cb for (topic, cb) in list(self._subscribers.values()) if topic == channel]
        for callback in targets:
            try:
                await callback(dict(event))
            except Exception as exc:
                log.error("push mock subscriber error on %s: %s", channel, exc)
        return len(targets)

    def emit_error(self, error: Any) -> None:
        for listener in list(self._error_listeners):
            listener(error)

    def subscriber_count(self, channel: Optional[ChannelName] = None) -> int:
        if channel is None:
            return len(self._subscribers)
        return sum(1 for topic, _ in self._subscribers.values() if topic == channel)

    @property
    def error_listener_count(self) -> int:
        return len(self._error_listeners)
