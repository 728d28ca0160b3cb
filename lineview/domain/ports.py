from __future__ import annotations

from typing import Any, Awaitable, Callable, Mapping, Optional, Protocol, Sequence

from lineview.domain.entities import LineItem
from lineview.domain.navigation import NavigationRequest

RecordId = str
ParentId = str
ChannelName = str

# Replay position understood by push channels: start with new events only.
REPLAY_NEW_ONLY = -1

MessageCallback = Callable[[Mapping[str, Any]], Awaitable[None]]
ErrorListener = Callable[[Any], None]


# ---- Error model ----
class UseCaseError(Exception):
    """Base class for use case level errors (user-presentable)."""

    def __init__(self, code: str, message: str, meta: Optional[dict] = None):
        super().__init__(message)
        self.code = code
        self.message = message
        self.meta = meta


# ---- Ports (Hexagonal boundaries) ----
class RecordPort(Protocol):
    """Remote procedures for line items and the caller's role."""

    async def fetch_line_items(self, parent_id: ParentId) -> Sequence[LineItem]: ...
    async def check_elevated_role(self) -> bool: ...
    async def delete_line_item(self, line_item_id: RecordId) -> None: ...  # raises if unknown


class PushChannelPort(Protocol):
    """Push channel delivering invalidation events.

    ``subscribe`` returns an opaque handle; ``unsubscribe`` accepts a handle
    that was already released without failing.
    """

    async def subscribe(
        self, channel: ChannelName, replay_id: int, callback: MessageCallback
    ) -> Any: ...
    async def unsubscribe(self, handle: Any) -> None: ...
    def on_error(self, listener: ErrorListener) -> Callable[[], None]: ...  # returns remover


class NavigationPort(Protocol):
    """Navigation service receiving record-detail targets."""

    async def navigate(self, request: NavigationRequest) -> None: ...
