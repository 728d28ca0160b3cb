"""Root logger setup for the console host.

``LINEVIEW_LOG_LEVEL`` (level name or number) wins over everything else;
a truthy ``LINEVIEW_DEBUG`` forces DEBUG. Without either, the level comes
from the caller and later from ``SettingsConfig.debug_logging``.
"""

from __future__ import annotations

import logging
import os
from typing import Optional

_FORMAT = "%(asctime)s %(levelname)-7s %(name)s: %(message)s"
_DATEFMT = "%H:%M:%S"
_ENV_LEVEL = "LINEVIEW_LOG_LEVEL"
_ENV_DEBUG = "LINEVIEW_DEBUG"

# httpx and urllib3 log every request at INFO/DEBUG; keep them quiet unless
# the panel itself runs at DEBUG.
_TRANSPORT_LOGGERS = ("httpx", "httpcore", "urllib3")


def _parse_level(raw: Optional[str]) -> Optional[int]:
    text = (raw or "").strip()
    if not text:
        return None
    if text.isdigit():
        return int(text)
    level = logging.getLevelName(text.upper())
    return level if isinstance(level, int) else None


def _env_level() -> Optional[int]:
    explicit = _parse_level(os.getenv(_ENV_LEVEL))
    if explicit is not None:
        return explicit
    if (os.getenv(_ENV_DEBUG) or "").strip().lower() in {"1", "true", "yes", "on"}:
        return logging.DEBUG
    return None


def _set_level(level: int) -> int:
    logging.getLogger().setLevel(level)
    transport_level = level if level <= logging.DEBUG else logging.WARNING
    for name in _TRANSPORT_LOGGERS:
        logging.getLogger(name).setLevel(transport_level)
    return level


def configure_root(default_level: int | str = logging.INFO) -> int:
    """Install a stream handler once and return the effective root level."""
    fallback = default_level if isinstance(default_level, int) else _parse_level(default_level)
    level = _env_level() or fallback or logging.INFO
    if not logging.getLogger().handlers:
        logging.basicConfig(level=level, format=_FORMAT, datefmt=_DATEFMT)
    return _set_level(level)


def apply_preferences(debug_enabled: bool) -> int:
    """Apply the ``debug_logging`` setting unless the environment overrides it."""
    level = _env_level()
    if level is None:
        level = logging.DEBUG if debug_enabled else logging.INFO
    return _set_level(level)
