"""Parsing of push-channel invalidation events."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

DEFAULT_PARENT_ID_FIELD = "Opportunity_Id_c__c"


@dataclass(frozen=True)
class InvalidationMessage:
    """Notification that line items of ``parent_id`` changed in the backend."""

    parent_id: str
    payload: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_event(
        cls,
        event: Mapping[str, Any],
        *,
        parent_id_field: str = DEFAULT_PARENT_ID_FIELD,
    ) -> Optional["InvalidationMessage"]:
        """Extract the parent identifier from a raw event mapping.

        The identifier is looked up in ``data.payload`` (platform event
        envelope), then ``payload``, then the event itself. Returns ``None``
        when no non-empty identifier is present.
        """
        if not isinstance(event, Mapping):
            return None
        for payload in _candidate_payloads(event):
            value = payload.get(parent_id_field)
            if value is None:
                continue
            text = str(value).strip()
            if text:
                return cls(parent_id=text, payload=dict(payload))
        return None

    def concerns(self, parent_id: Optional[str]) -> bool:
        return bool(parent_id) and self.parent_id == parent_id


def _candidate_payloads(event: Mapping[str, Any]):
    data = event.get("data")
    if isinstance(data, Mapping):
        nested = data.get("payload")
        if isinstance(nested, Mapping):
            yield nested
    payload = event.get("payload")
    if isinstance(payload, Mapping):
        yield payload
    yield event


__all__ = ["DEFAULT_PARENT_ID_FIELD", "InvalidationMessage"]
