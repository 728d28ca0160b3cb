"""Row action identifiers and their role gating."""

from __future__ import annotations

from typing import Tuple

ACTION_DELETE = "delete"
ACTION_VIEW = "view"


def allowed_actions(elevated: bool) -> Tuple[str, ...]:
    """Delete is always offered; opening the product detail needs the elevated role."""
    if elevated:
        return (ACTION_DELETE, ACTION_VIEW)
    return (ACTION_DELETE,)


__all__ = ["ACTION_DELETE", "ACTION_VIEW", "allowed_actions"]
