"""Blocking ``requests`` transport shared by the record REST adapter.

Only timeouts and connection failures are retried, and only when
``HttpConfig.retries`` is raised above its default of zero. Status codes are
never interpreted here; ``RecordsRestAdapter`` maps them through
``api_errors.raise_for_response``. Calls block, so the adapter runs them in
``asyncio.to_thread``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import requests
from requests import exceptions as req_exc

from lineview.adapters.api_errors import ApiTimeoutError

log = logging.getLogger(__name__)


@dataclass
class HttpConfig:
    """Per-call timeout (seconds) and extra attempts after a transport failure."""
    request_timeout_s: int = 10
    retries: int = 0


class RetryingSession:
    """``requests.Session`` with bearer auth, JSON accept header and retries."""

    def __init__(self, api_key: Optional[str], cfg: HttpConfig) -> None:
        self.session = requests.Session()
        self.session.headers["Accept"] = "application/json"
        if api_key:
            self.session.headers["Authorization"] = f"Bearer {api_key}"
        self.cfg = cfg

    def get(
        self,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        return self.request("GET", url, params=params, timeout=timeout)

    def delete(self, url: str, *, timeout: Optional[int] = None) -> requests.Response:
        return self.request("DELETE", url, timeout=timeout)

    def request(
        self,
        method: str,
        url: str,
        *,
        params: Optional[Dict[str, Any]] = None,
        timeout: Optional[int] = None,
    ) -> requests.Response:
        """Send one request, retrying transport failures ``cfg.retries`` times.

        Raises:
            ApiTimeoutError: Every attempt timed out or failed to connect.
        """
        attempts = max(0, self.cfg.retries) + 1
        for attempt in range(1, attempts + 1):
            try:
                return self.session.request(
                    method,
                    url,
                    params=params,
                    timeout=timeout or self.cfg.request_timeout_s,
                )
            except (req_exc.Timeout, req_exc.ConnectionError) as exc:
                log.debug("%s %s attempt %d/%d failed: %s", method, url, attempt, attempts, exc)
                if attempt == attempts:
                    raise ApiTimeoutError(
                        f"Timeout contacting {url}", context=f"{method} {url}"
                    ) from exc
        raise AssertionError("unreachable")

    def close(self) -> None:
        self.session.close()


__all__ = ["HttpConfig", "RetryingSession"]
