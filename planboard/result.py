"""
Typed success/failure results.

Store calls can fail (network, auth, broken rows). The gateway never lets
those exceptions cross into callers; it hands back a Result instead and
leaves the user-facing message to the caller.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar


T = TypeVar("T")
U = TypeVar("U")


class ResultStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Outcome of an operation that may fail.

    Examples:
        >>> Result.success(42).unwrap()
        42
        >>> Result.failure("store offline").unwrap_or(0)
        0
    """

    status: ResultStatus
    value: Optional[T] = None
    error: Optional[Exception] = None
    message: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def is_failure(self) -> bool:
        return self.status == ResultStatus.FAILURE

    @classmethod
    def success(cls, value: T, message: Optional[str] = None) -> "Result[T]":
        return cls(status=ResultStatus.SUCCESS, value=value, message=message)

    @classmethod
    def failure(cls, message: str, error: Optional[Exception] = None) -> "Result[T]":
        return cls(status=ResultStatus.FAILURE, message=message, error=error)

    def unwrap(self) -> T:
        """
        Return the value, or raise ValueError for a failure.
        """
        if self.is_failure:
            raise ValueError(f"Cannot unwrap failure result: {self.message}")
        return self.value  # type: ignore[return-value]

    def unwrap_or(self, default: T) -> T:
        return self.value if self.is_success else default  # type: ignore[return-value]

    def map(self, func: Callable[[T], U]) -> "Result[U]":
        """
        Apply func to a success value; failures pass through unchanged.
        """
        if self.is_failure:
            return Result.failure(self.message or "", self.error)
        return Result.success(func(self.value), self.message)  # type: ignore[arg-type]
