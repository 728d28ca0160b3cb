"""Typed failures raised by the record REST and push-channel adapters.

Record APIs answer errors in one of three shapes::

    [{"errorCode": "ENTITY_IS_DELETED", "message": "...", "fields": []}]
    {"error": "invalid_grant", "message": "...", "hint": "..."}
    "plain text body"

:func:`raise_for_response` turns a non-2xx status plus decoded body into the
matching exception so use cases can map them to stable error codes.
"""

from __future__ import annotations

from typing import Any, Optional, Tuple

_DETAIL_KEYS = ("message", "error_description", "detail", "error")
_HINT_KEYS = ("hint", "fields", "details")
_MAX_TEXT = 200


class ApiError(RuntimeError):
    """Base class for REST and push-channel adapter failures."""

    def __init__(
        self,
        message: str,
        *,
        status: Optional[int] = None,
        code: Optional[str] = None,
        hint: Optional[str] = None,
        payload: Any = None,
        context: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.status = status
        self.code = code
        self.hint = hint
        self.payload = payload
        self.context = context


class ApiClientError(ApiError):
    """HTTP 4xx: the request was rejected (auth, missing record, validation)."""


class ApiServerError(ApiError):
    """HTTP 5xx from the record API or stream endpoint."""


class ApiTimeoutError(ApiError):
    """Timeout or connection failure before any response arrived."""


def parse_error_payload(resp: Any) -> Any:
    """Decode an error body as JSON, falling back to a text snippet."""
    try:
        return resp.json()
    except Exception:
        text = (getattr(resp, "text", "") or "").strip()
        return text[:400] or None


def raise_for_response(status: int, payload: Any, ctx: str) -> None:
    """Raise the typed error matching a non-2xx ``status``; no-op on 2xx."""
    if 200 <= status < 300:
        return
    code, detail, hint = describe_payload(payload)
    message = f"{ctx}: {detail} (HTTP {status})" if detail else f"{ctx}: HTTP {status}"
    if 400 <= status < 500:
        error_cls = ApiClientError
    elif status >= 500:
        error_cls = ApiServerError
    else:
        error_cls = ApiError
    raise error_cls(message, status=status, code=code, hint=hint, payload=payload, context=ctx)


def describe_payload(payload: Any) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """Return ``(code, detail, hint)`` found in an error body."""
    if isinstance(payload, list):
        entries = [entry for entry in payload if isinstance(entry, dict)]
        if not entries:
            return None, _text(payload), None
        code, detail, hint = describe_payload(entries[0])
        extra = [_text(entry.get("message")) for entry in entries[1:]]
        extra = [text for text in extra if text]
        if extra:
            hint = "; ".join(([hint] if hint else []) + extra)[:_MAX_TEXT]
        return code, detail, hint
    if isinstance(payload, dict):
        code = payload.get("errorCode") or payload.get("code")
        detail = next((_text(payload[k]) for k in _DETAIL_KEYS if _text(payload.get(k))), None)
        hint = next((_text(payload[k]) for k in _HINT_KEYS if _text(payload.get(k))), None)
        return (str(code) if code is not None else None), detail, hint
    return None, _text(payload), None


def error_hint(payload: Any) -> Optional[str]:
    return describe_payload(payload)[2]


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        parts = [part for part in (_text(item) for item in value) if part]
        return ", ".join(parts)[:_MAX_TEXT] or None
    if isinstance(value, dict):
        return _text(value.get("message"))
    text = str(value).strip()
    return text[:_MAX_TEXT] or None
