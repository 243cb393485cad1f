"""Per-item query results.

When one aggregate is assembled from many independent upstream queries,
each query produces either a :py:class:`QuerySuccess` or a :py:class:`QueryFailure`.
The aggregate decides how to fold failures into its report instead of dropping them.
"""
from dataclasses import dataclass
from typing import Generic, TypeAlias, TypeVar, Union

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class QuerySuccess(Generic[T]):
    """Query for one item succeeded."""

    #: Which item was queried, e.g. a candidate address
    key: str

    value: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True, slots=True)
class QueryFailure:
    """Query for one item failed."""

    #: Which item was queried, e.g. a candidate address
    key: str

    #: Human readable error
    reason: str

    @property
    def ok(self) -> bool:
        return False

    @staticmethod
    def from_exception(key: str, e: Exception) -> "QueryFailure":
        return QueryFailure(key=key, reason=f"{e.__class__.__name__}: {e}")


QueryOutcome: TypeAlias = Union[QuerySuccess[T], QueryFailure]
