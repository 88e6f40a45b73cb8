"""Error taxonomy and error mapping for the billing API."""

from billing_client_core.errors.exceptions import (
    APIError,
    AuthorizationError,
    ClientError,
    ConflictError,
    NotFoundError,
    RateLimitedError,
    RetriesExhaustedError,
    ServerError,
    TimeoutError,
    TransportError,
    ValidationError,
    exception_for,
)
from billing_client_core.errors.handler import error_from_response, kind_for_status, map_error, transport_error
from billing_client_core.errors.models import ErrorKind, ErrorParam, ErrorRecord

__all__ = [
    "APIError",
    "AuthorizationError",
    "ClientError",
    "ConflictError",
    "ErrorKind",
    "ErrorParam",
    "ErrorRecord",
    "NotFoundError",
    "RateLimitedError",
    "RetriesExhaustedError",
    "ServerError",
    "TimeoutError",
    "TransportError",
    "ValidationError",
    "error_from_response",
    "exception_for",
    "kind_for_status",
    "map_error",
    "transport_error",
]
