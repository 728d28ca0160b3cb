"""Elevated-role flag for one panel.

Call context:
    ``LineItemsPanel.start`` resolves the gate once; ``RowActionDispatcher``
    and ``LineItemsVM`` read ``is_elevated`` to decide whether the view action
    is offered and honored.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from lineview.domain.errors import RoleResolutionError
from lineview.usecases.error_mapping import map_api_error

log = logging.getLogger(__name__)


class RoleGate:
    """Fetch-once elevated-role flag, fail-closed.

    The remote check runs at most once per instance; every ``resolve()`` call
    shares that outcome. Until it succeeds with ``True`` the gate reports a
    non-privileged caller.
    """

    def __init__(
        self,
        check: Callable[[], Awaitable[bool]],
        *,
        on_resolved: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self._check = check
        self.on_resolved = on_resolved
        self._elevated = False
        self._task: Optional[asyncio.Task] = None
        self.error: Optional[RoleResolutionError] = None

    @property
    def is_elevated(self) -> bool:
        return self._elevated

    @property
    def resolved(self) -> bool:
        return self._task is not None and self._task.done()

    async def resolve(self) -> bool:
        if self._task is None:
            self._task = asyncio.create_task(self._resolve_once())
        return await asyncio.shield(self._task)

    async def _resolve_once(self) -> bool:
        try:
            flag = await self._check()
        except Exception as exc:
            self.error = map_api_error(
                exc,
                RoleResolutionError,
                default_code="ROLE_CHECK_FAILED",
                default_message="Failed to resolve user role.",
            )
            log.error("Role check failed, staying non-privileged [%s]: %s", self.error.code, self.error.message)
            flag = False
        self._elevated = flag is True
        log.debug("Elevated role resolved: %s", self._elevated)
        if self.on_resolved is not None:
            try:
                self.on_resolved(self._elevated)
            except Exception as exc:
                log.error("Role resolution hook failed: %s", exc)
        return self._elevated


__all__ = ["RoleGate"]
