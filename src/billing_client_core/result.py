"""Result values returned by the executor and the pager."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Generic, TypeVar

if TYPE_CHECKING:
    from billing_client_core.errors.models import ErrorRecord

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Either a value or an `ErrorRecord`, never both.

    Example:
        ```python
        result = executor.execute(request)
        if result.ok:
            account = result.value.data
        elif result.error.kind.retryable:
            ...

        # Or let the typed exception propagate
        account = executor.execute(request).unwrap().data
        ```
    """

    value: T | None = None
    error: "ErrorRecord | None" = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: "ErrorRecord") -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the exception mapped from the error."""
        if self.error is not None:
            raise self.error.to_exception()
        return self.value
