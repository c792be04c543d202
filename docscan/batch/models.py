from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class BatchItem(Generic[T]):
    """Outcome of one ordinal inside a batch: either a value or an error."""

    ordinal: int
    value: T | None = None
    error: str | None = None
    error_type: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, ordinal: int, value: T) -> "BatchItem[T]":
        return cls(ordinal=ordinal, value=value)

    @classmethod
    def failure(cls, ordinal: int, exc: BaseException) -> "BatchItem[T]":
        return cls(ordinal=ordinal, error=str(exc), error_type=type(exc).__name__)


@dataclass
class BatchResult(Generic[T]):
    """Ordered per-item outcomes; items appear in submission order."""

    items: list[BatchItem[T]] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded_count(self) -> int:
        return sum(1 for item in self.items if item.ok)

    @property
    def failed_count(self) -> int:
        return sum(1 for item in self.items if not item.ok)

    @property
    def total(self) -> int:
        return len(self.items)

    def values(self) -> list[T]:
        return [item.value for item in self.items if item.ok and item.value is not None]
