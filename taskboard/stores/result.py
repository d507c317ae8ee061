"""StoreResult — value-or-error container returned by store operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from taskboard.engine.errors import TaskboardError

T = TypeVar("T")


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """
    Outcome of a store operation.

    Expected failures (not found, malformed id, validation, duplicate email,
    missing assignee) travel in ``error``; ``unwrap()`` turns them back into
    exceptions for callers that prefer raising.
    """

    value: Optional[T] = None
    error: Optional[TaskboardError] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T) -> "StoreResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: TaskboardError) -> "StoreResult[T]":
        return cls(error=error)

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
