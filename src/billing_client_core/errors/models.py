"""Error records produced by the error mapper."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from billing_client_core.errors.exceptions import APIError


class ErrorKind(str, Enum):
    """Coarse classification of a failed call."""

    VALIDATION = "validation"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    RATE_LIMITED = "rate_limited"
    SERVER = "server"
    CLIENT = "client"
    UNEXPECTED = "unexpected"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    RETRIES_EXHAUSTED = "retries_exhausted"

    @property
    def retryable(self) -> bool:
        """Whether the retry policy may repeat a call that failed this way."""
        return self in _RETRYABLE_KINDS


_RETRYABLE_KINDS = frozenset([ErrorKind.RATE_LIMITED, ErrorKind.SERVER, ErrorKind.TRANSPORT])


@dataclass(frozen=True)
class ErrorParam:
    """A single parameter-level error from the error envelope."""

    param: str
    message: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> "ErrorParam":
        if not isinstance(data, dict):
            return cls(param=str(data))
        return cls(param=str(data.get("param", "")), message=str(data.get("message", "") or ""))


@dataclass(frozen=True)
class ErrorRecord:
    """Immutable description of one failed call.

    Attributes:
        kind: Coarse classification
        http_status: Status code of the (last) response, or None when no
            response was received
        message: Human-readable message, from the envelope when present
        params: Parameter-level errors, in server order
        error_type: The envelope's `type` field (e.g. "validation")
        retry_after: Seconds from a Retry-After header, if any
        retries: Number of retries performed before giving up
        cause: Underlying failure for TIMEOUT / RETRIES_EXHAUSTED records
    """

    kind: ErrorKind
    http_status: int | None
    message: str
    params: tuple[ErrorParam, ...] = field(default=())
    error_type: str | None = None
    retry_after: float | None = None
    retries: int = 0
    cause: "ErrorRecord | None" = None

    def to_exception(self) -> "APIError":
        """Build the exception for this record (not raised)."""
        from billing_client_core.errors.exceptions import exception_for

        return exception_for(self)

    def __str__(self) -> str:
        lines = [f"{self.kind.value}: {self.message}"]
        for param in self.params:
            lines.append(f"  - {param.param}: {param.message}" if param.message else f"  - {param.param}")
        return "\n".join(lines)
