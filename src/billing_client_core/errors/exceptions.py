"""Structured exceptions for API errors.

Every exception carries the `ErrorRecord` it was built from, so code that
prefers exceptions (`Result.unwrap()`, pager iteration) keeps the status
code and parameter errors.
"""

from billing_client_core.errors.models import ErrorKind, ErrorParam, ErrorRecord


class APIError(Exception):
    """Base exception for API errors."""

    def __init__(self, record: ErrorRecord):
        super().__init__(record.message)
        self.record = record

    @property
    def status_code(self) -> int | None:
        return self.record.http_status

    @property
    def params(self) -> tuple[ErrorParam, ...]:
        return self.record.params


class ClientError(APIError):
    """4xx client errors."""

    pass


class ValidationError(ClientError):
    """400 / 422 (invalid request, carries parameter errors)."""

    pass


class AuthorizationError(ClientError):
    """401 / 403."""

    pass


class NotFoundError(ClientError):
    """404 Not Found."""

    pass


class ConflictError(ClientError):
    """409 Conflict (e.g. concurrent modification)."""

    pass


class RateLimitedError(ClientError):
    """429 Too Many Requests."""

    @property
    def retry_after(self) -> float | None:
        return self.record.retry_after


class ServerError(APIError):
    """5xx server errors."""

    pass


class TransportError(APIError):
    """Network failure before any response was received."""

    pass


class TimeoutError(APIError):  # noqa: A001
    """The call deadline expired."""

    pass


class RetriesExhaustedError(APIError):
    """The retry cap was reached; `cause` is the last failure."""

    @property
    def cause(self) -> ErrorRecord | None:
        return self.record.cause


_EXCEPTIONS: dict[ErrorKind, type[APIError]] = {
    ErrorKind.VALIDATION: ValidationError,
    ErrorKind.AUTHORIZATION: AuthorizationError,
    ErrorKind.NOT_FOUND: NotFoundError,
    ErrorKind.CONFLICT: ConflictError,
    ErrorKind.RATE_LIMITED: RateLimitedError,
    ErrorKind.SERVER: ServerError,
    ErrorKind.CLIENT: ClientError,
    ErrorKind.UNEXPECTED: APIError,
    ErrorKind.TRANSPORT: TransportError,
    ErrorKind.TIMEOUT: TimeoutError,
    ErrorKind.RETRIES_EXHAUSTED: RetriesExhaustedError,
}


def exception_for(record: ErrorRecord) -> APIError:
    """Instantiate the exception class matching `record.kind`."""
    return _EXCEPTIONS[record.kind](record)
