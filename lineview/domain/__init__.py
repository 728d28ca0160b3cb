"""Domain package exports for value objects and errors."""

from .entities import LineItem, Product
from .errors import (
    MutationError,
    PanelError,
    QueryError,
    RoleResolutionError,
    SubscriptionError,
)
from .invalidation import InvalidationMessage
from .navigation import NavigationRequest
from .query_result import QueryResult

__all__ = [
    "InvalidationMessage",
    "LineItem",
    "MutationError",
    "NavigationRequest",
    "PanelError",
    "Product",
    "QueryError",
    "QueryResult",
    "RoleResolutionError",
    "SubscriptionError",
]
