from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, Optional, TypeVar


T = TypeVar("T")


class FailureKind(str, Enum):
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a market data fetch: a value, or a tagged failure."""

    value: Optional[T] = None
    failure: Optional[FailureKind] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    @property
    def not_found(self) -> bool:
        return self.failure is FailureKind.NOT_FOUND

    @classmethod
    def success(cls, value: T) -> "FetchResult[T]":
        return cls(value=value)

    @classmethod
    def failed(cls, kind: FailureKind, detail: str | None = None) -> "FetchResult[T]":
        return cls(failure=kind, detail=detail)
