"""Translate adapter errors into panel error instances."""

from __future__ import annotations

from typing import Optional, Type

from lineview.adapters.api_errors import (
    ApiClientError,
    ApiError,
    ApiServerError,
    ApiTimeoutError,
    error_hint,
)
from lineview.domain.errors import PanelError


def map_api_error(
    exc: Exception,
    error_cls: Type[PanelError],
    *,
    default_code: str,
    default_message: Optional[str] = None,
) -> PanelError:
    """Map adapter exceptions to ``error_cls`` instances with stable codes.

    Args:
        exc: Exception raised by an adapter or port implementation.
        error_cls: Panel error class matching the failing operation.
        default_code: Code used for exceptions that are not ``ApiError``.
        default_message: Message used when ``exc`` carries no text.

    Returns:
        A ``PanelError`` subclass instance; ``exc`` itself if it already is one.
    """
    if isinstance(exc, PanelError):
        return exc
    if isinstance(exc, ApiTimeoutError):
        return error_cls("REQUEST_TIMEOUT", "Request timed out. Check connection.")
    if isinstance(exc, ApiClientError):
        status = exc.status or 0
        hint = exc.hint or error_hint(exc.payload)
        if status == 404:
            return error_cls("NOT_FOUND", _compose_error_message("Record not found", hint))
        if status in (401, 403):
            return error_cls("AUTH_FAILED", "Not authorized for this operation.")
        label = f"Request failed (HTTP {status})" if status else "Request failed"
        return error_cls("REQUEST_FAILED", _compose_error_message(label, hint))
    if isinstance(exc, ApiServerError):
        return error_cls("SERVER_ERROR", "Server error, try again.")
    if isinstance(exc, ApiError):
        return error_cls("API_ERROR", str(exc))

    message = default_message or str(exc) or "Unexpected error."
    return error_cls(default_code, message)


def _compose_error_message(base: str, hint: Optional[str]) -> str:
    hint_text = (hint or "").strip()
    if hint_text:
        return f"{base}: {hint_text}"
    if base.endswith("."):
        return base
    return f"{base}."


__all__ = ["map_api_error"]
