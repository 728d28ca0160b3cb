from __future__ import annotations

import logging
from typing import List

from lineview.domain.navigation import NavigationRequest
from lineview.domain.ports import NavigationPort

log = logging.getLogger(__name__)


class LoggingNavigator(NavigationPort):
    """Navigation stub that records and logs requests instead of routing them."""

    def __init__(self) -> None:
        self.requests: List[NavigationRequest] = []

    async def navigate(self, request: NavigationRequest) -> None:
        self.requests.append(request)
        log.info("Navigate: %s", request.to_dict())
