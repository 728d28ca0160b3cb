"""Navigation target descriptor handed to the external navigation service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict


@dataclass(frozen=True)
class NavigationRequest:
    """Request to open the detail page of a record."""

    record_id: str
    entity_type: str = "Product"
    intent: str = "view"
    target_type: str = "recordDetail"

    def __post_init__(self) -> None:
        if not isinstance(self.record_id, str) or not self.record_id.strip():
            raise ValueError("NavigationRequest requires a non-empty record_id.")

    def to_dict(self) -> Dict[str, str]:
        return {
            "targetType": self.target_type,
            "recordId": self.record_id,
            "entityType": self.entity_type,
            "intent": self.intent,
        }


__all__ = ["NavigationRequest"]
