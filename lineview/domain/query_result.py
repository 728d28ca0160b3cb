"""Tagged query result: loading, success with rows, or failure."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from lineview.domain.entities import LineItem
from lineview.domain.errors import QueryError

LOADING = "loading"
SUCCESS = "success"
FAILURE = "failure"


@dataclass(frozen=True)
class QueryResult:
    """Exactly one of loading / success / failure.

    Instances are replaced wholesale on refresh; use the constructors below
    instead of building variants by hand.
    """

    status: str
    items: Tuple[LineItem, ...] = ()
    error: Optional[QueryError] = None

    def __post_init__(self) -> None:
        if self.status not in (LOADING, SUCCESS, FAILURE):
            raise ValueError(f"Unknown query status: {self.status!r}")
        if self.status == FAILURE and self.error is None:
            raise ValueError("Failure result requires an error.")
        if self.status != FAILURE and self.error is not None:
            raise ValueError("Only failure results carry an error.")
        if self.status != SUCCESS and self.items:
            raise ValueError("Only success results carry items.")

    @classmethod
    def loading(cls) -> "QueryResult":
        return cls(status=LOADING)

    @classmethod
    def success(cls, items: Iterable[LineItem]) -> "QueryResult":
        return cls(status=SUCCESS, items=tuple(items))

    @classmethod
    def failure(cls, error: QueryError) -> "QueryResult":
        return cls(status=FAILURE, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status == LOADING

    @property
    def is_success(self) -> bool:
        return self.status == SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == FAILURE


__all__ = ["FAILURE", "LOADING", "SUCCESS", "QueryResult"]
