"""Success/failure result for operations that cross the network."""

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Result of a remote operation.

    Remote calls never raise for transport, status or payload problems;
    they hand back a failed Result carrying the error description instead.
    """

    success: bool
    value: T | None = None
    error: str | None = None

    @classmethod
    def ok(cls, value: T | None = None) -> "Result[T]":
        return cls(success=True, value=value)

    @classmethod
    def fail(cls, error: str) -> "Result[T]":
        return cls(success=False, error=error or "Unknown error")

    def get_or_none(self) -> T | None:
        return self.value if self.success else None

    def get_or_default(self, default: T) -> T:
        if self.success and self.value is not None:
            return self.value
        return default
