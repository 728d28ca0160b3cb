"""Typed runtime settings for the line-item panel and its adapters."""

from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Mapping

from lineview.domain.invalidation import DEFAULT_PARENT_ID_FIELD

DEFAULT_CHANNEL_NAME = "/event/OpportunityProductUpdate_e__e"


@dataclass(frozen=True)
class SettingsConfig:
    """Typed runtime settings that persist via StorageLocal."""

    api_base_url: str = ""
    stream_url: str = ""
    api_key: str = ""
    request_timeout_s: int = 10
    retries: int = 0
    channel_name: str = DEFAULT_CHANNEL_NAME
    parent_id_field: str = DEFAULT_PARENT_ID_FIELD
    debug_logging: bool = False

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "SettingsConfig":
        """Build settings from a flat mapping, coercing value types."""
        if not isinstance(payload, Mapping):
            raise ValueError("Settings payload must be a mapping of flat keys.")

        known = {f.name for f in fields(cls)}
        unknown = set(payload.keys()) - known
        if unknown:
            raise ValueError(f"Unsupported settings keys: {', '.join(sorted(str(key) for key in unknown))}")

        updates: Dict[str, Any] = {}
        for key, raw in payload.items():
            updates[key] = _coerce_value(key, raw)
        return cls(**updates)

    def merged(self, overrides: Mapping[str, Any]) -> "SettingsConfig":
        """Return a copy with non-``None`` overrides applied."""
        current = self.to_dict()
        current.update({key: value for key, value in overrides.items() if value is not None})
        return SettingsConfig.from_mapping(current)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _coerce_value(key: str, raw: Any) -> Any:
    if key in {"request_timeout_s", "retries"}:
        return _coerce_int(key, raw)
    if key == "debug_logging":
        return _coerce_bool(raw)
    if key in {"api_base_url", "stream_url"}:
        return _coerce_str(raw).rstrip("/")
    return _coerce_str(raw)


def _coerce_str(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _coerce_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return bool(value)
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


def _coerce_int(name: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"{name} must be an integer.")
    if isinstance(value, (int, float)):
        coerced = int(value)
    elif isinstance(value, str):
        try:
            coerced = int(value.strip())
        except (TypeError, ValueError) as exc:
            raise ValueError(f"{name} must be an integer.") from exc
    else:
        raise ValueError(f"{name} must be an integer.")
    if coerced < 0:
        raise ValueError(f"{name} must be non-negative.")
    return coerced


__all__ = ["DEFAULT_CHANNEL_NAME", "SettingsConfig"]
