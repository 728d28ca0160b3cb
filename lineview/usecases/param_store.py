"""Observable holder for the parent-record identifier a panel is bound to."""

from __future__ import annotations

import logging
from typing import Callable, List, Optional

log = logging.getLogger(__name__)

ParamObserver = Callable[[Optional[str]], None]


def _normalize(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


class ParamStore:
    """Reactive parameter: observers are told whenever the value changes.

    Setting the current value again is not a change and notifies nobody.
    """

    def __init__(self, value: Optional[str] = None) -> None:
        self._value = _normalize(value)
        self._observers: List[ParamObserver] = []

    @property
    def value(self) -> Optional[str]:
        return self._value

    def set(self, value: Optional[str]) -> bool:
        """Store ``value``; returns ``True`` when observers were notified."""
        normalized = _normalize(value)
        if normalized == self._value:
            return False
        self._value = normalized
        for observer in list(self._observers):
            try:
                observer(normalized)
            except Exception as exc:
                log.error("parameter observer failed: %s", exc)
        return True

    def subscribe(self, observer: ParamObserver) -> Callable[[], None]:
        """Register ``observer``; returns a callable that removes it again."""
        self._observers.append(observer)

        def _remove() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _remove


__all__ = ["ParamStore"]
