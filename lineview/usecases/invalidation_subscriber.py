"""Push-channel subscription that refreshes the query on relevant invalidations.

State machine::

    UNSUBSCRIBED -> SUBSCRIBING -> SUBSCRIBED -> UNSUBSCRIBING -> UNSUBSCRIBED

Subscribe failures and unsubscribe failures are logged and never retried. The
handle is dropped on stop whether or not the channel accepted the release.
Only events published after subscribing are delivered; the initial query
fetch covers everything that happened before.
"""

from __future__ import annotations

import enum
import logging
from typing import Any, Awaitable, Callable, Mapping, Optional

from lineview.domain.errors import SubscriptionError
from lineview.domain.invalidation import DEFAULT_PARENT_ID_FIELD, InvalidationMessage
from lineview.domain.ports import REPLAY_NEW_ONLY, ChannelName, PushChannelPort
from lineview.usecases.error_mapping import map_api_error

log = logging.getLogger(__name__)


class SubscriberState(enum.Enum):
    UNSUBSCRIBED = "unsubscribed"
    SUBSCRIBING = "subscribing"
    SUBSCRIBED = "subscribed"
    UNSUBSCRIBING = "unsubscribing"


class InvalidationSubscriber:
    """Owns at most one push-channel subscription for one panel."""

    def __init__(
        self,
        channel: PushChannelPort,
        channel_name: ChannelName,
        *,
        bound_parent_id: Callable[[], Optional[str]],
        on_invalidate: Callable[[], Awaitable[None]],
        parent_id_field: str = DEFAULT_PARENT_ID_FIELD,
    ) -> None:
        self.channel = channel
        self.channel_name = channel_name
        self.parent_id_field = parent_id_field
        self._bound_parent_id = bound_parent_id
        self._on_invalidate = on_invalidate
        self._state = SubscriberState.UNSUBSCRIBED
        self._subscription: Any = None
        self._stop_requested = False
        self._remove_error_listener: Optional[Callable[[], None]] = None
        self.last_error: Optional[SubscriptionError] = None

    @property
    def state(self) -> SubscriberState:
        return self._state

    @property
    def subscription(self) -> Any:
        return self._subscription

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    async def start(self) -> None:
        if self._state is SubscriberState.SUBSCRIBING and self._stop_requested:
            # Re-attached before the pending subscribe resolved: keep the handle.
            self._stop_requested = False
            self._register_error_listener()
            return
        if self._state is not SubscriberState.UNSUBSCRIBED:
            log.debug("start() ignored in state %s", self._state.value)
            return
        self._register_error_listener()
        self._stop_requested = False
        self._state = SubscriberState.SUBSCRIBING
        try:
            handle = await self.channel.subscribe(
                self.channel_name, REPLAY_NEW_ONLY, self._handle_message
            )
        except Exception as exc:
            self._record_error(exc, "SUBSCRIBE_FAILED", "Failed to subscribe to line item updates.")
            self._state = SubscriberState.UNSUBSCRIBED
            return

        self._subscription = handle
        self._state = SubscriberState.SUBSCRIBED
        log.info("Subscribed to %s", self.channel_name)
        if self._stop_requested:
            # stop() arrived while the subscribe call was pending.
            await self._release()

    async def stop(self) -> None:
        if self._state is SubscriberState.SUBSCRIBING:
            self._stop_requested = True
        elif self._state is SubscriberState.SUBSCRIBED:
            await self._release()
        self._unregister_error_listener()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _release(self) -> None:
        self._state = SubscriberState.UNSUBSCRIBING
        handle, self._subscription = self._subscription, None
        try:
            await self.channel.unsubscribe(handle)
            log.info("Unsubscribed from %s", self.channel_name)
        except Exception as exc:
            self._record_error(exc, "UNSUBSCRIBE_FAILED", "Failed to unsubscribe from line item updates.")
        finally:
            self._state = SubscriberState.UNSUBSCRIBED
            self._stop_requested = False

    async def _handle_message(self, event: Mapping[str, Any]) -> None:
        log.debug("Invalidation event received: %s", event)
        if self._state is not SubscriberState.SUBSCRIBED:
            return
        message = InvalidationMessage.from_event(event, parent_id_field=self.parent_id_field)
        if message is None:
            log.debug("Ignoring event without %s", self.parent_id_field)
            return
        if not message.concerns(self._bound_parent_id()):
            return
        try:
            await self._on_invalidate()
        except Exception as exc:
            log.error("Refresh after invalidation for %s failed: %s", message.parent_id, exc)

    def _register_error_listener(self) -> None:
        if self._remove_error_listener is not None:
            return
        self._remove_error_listener = self.channel.on_error(self._handle_channel_error)

    def _unregister_error_listener(self) -> None:
        if self._remove_error_listener is None:
            return
        remove, self._remove_error_listener = self._remove_error_listener, None
        remove()

    def _handle_channel_error(self, error: Any) -> None:
        log.error("Push channel error on %s: %s", self.channel_name, error)

    def _record_error(self, exc: Exception, code: str, message: str) -> None:
        self.last_error = map_api_error(
            exc, SubscriptionError, default_code=code, default_message=message
        )
        log.error("%s [%s]: %s", message, self.last_error.code, self.last_error.message)


__all__ = ["InvalidationSubscriber", "SubscriberState"]
