"""Panel-level error types shared across use cases and adapters.

Each failure class is isolated at the boundary where it occurs and logged;
none of them is fatal to a running panel.
"""

from __future__ import annotations

from lineview.domain.ports import UseCaseError


class PanelError(UseCaseError):
    """Base class for line-item panel failures."""


class QueryError(PanelError):
    """Line-item query failed; the panel degrades to an error/empty state."""


class RoleResolutionError(PanelError):
    """Role check failed; the panel stays non-privileged."""


class SubscriptionError(PanelError):
    """Push-channel subscribe, unsubscribe or transport failure."""


class MutationError(PanelError):
    """Remote delete failed; the displayed rows are left unchanged."""


__all__ = [
    "MutationError",
    "PanelError",
    "QueryError",
    "RoleResolutionError",
    "SubscriptionError",
]
