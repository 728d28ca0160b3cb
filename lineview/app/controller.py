"""Adapter wiring for the line-item panel runtime.

This module owns lazy construction of the concrete adapters that depend on
values in :class:`lineview.domain.settings.SettingsConfig` and hands them to
new :class:`~lineview.app.line_items_panel.LineItemsPanel` instances.
"""

from __future__ import annotations

from typing import Any, Optional

from ..adapters.navigation_log import LoggingNavigator
from ..adapters.push_sse import SsePushChannel
from ..adapters.records_rest import RecordsRestAdapter
from ..domain.ports import NavigationPort, PushChannelPort, RecordPort
from ..domain.settings import SettingsConfig
from .line_items_panel import LineItemsPanel


class AppController:
    """Create and cache runtime adapters from settings.

    Call chain:
        ``lineview.app.main`` creates one instance, calls ``ensure_ready`` and
        then ``create_panel`` per displayed parent record.
    """

    def __init__(
        self,
        settings: SettingsConfig,
        *,
        records: Optional[RecordPort] = None,
        push: Optional[PushChannelPort] = None,
        navigator: Optional[NavigationPort] = None,
    ) -> None:
        """Initialize controller; explicitly passed ports take precedence."""
        self.settings = settings
        self._records = records
        self._push = push
        self._navigator = navigator

    @property
    def records(self) -> Optional[RecordPort]:
        return self._records

    @property
    def push(self) -> Optional[PushChannelPort]:
        return self._push

    def ensure_ready(self) -> bool:
        """Ensure adapters are available.

        Returns:
            ``True`` when all ports exist, ``False`` when the settings lack the
            URLs needed to build them.
        """
        if self._navigator is None:
            self._navigator = LoggingNavigator()
        if self._records is None:
            if not self.settings.api_base_url:
                return False
            self._records = RecordsRestAdapter(
                self.settings.api_base_url,
                api_key=self.settings.api_key,
                request_timeout_s=self.settings.request_timeout_s,
                retries=self.settings.retries,
            )
        if self._push is None:
            if not self.settings.stream_url:
                return False
            self._push = SsePushChannel(
                self.settings.stream_url,
                api_key=self.settings.api_key,
                connect_timeout_s=self.settings.request_timeout_s,
            )
        return True

    def create_panel(self, parent_id: Optional[str], **kwargs: Any) -> LineItemsPanel:
        if not self.ensure_ready():
            raise RuntimeError("api_base_url and stream_url must be configured")
        return LineItemsPanel(
            self._records,
            self._push,
            self._navigator,
            parent_id=parent_id,
            channel_name=self.settings.channel_name,
            parent_id_field=self.settings.parent_id_field,
            **kwargs,
        )

    async def aclose(self) -> None:
        """Release transport resources held by the adapters."""
        close_push = getattr(self._push, "aclose", None)
        if close_push is not None:
            await close_push()
        close_records = getattr(self._records, "close", None)
        if close_records is not None:
            close_records()
