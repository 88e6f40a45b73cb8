"""Error mapping for HTTP responses and network failures."""

import json
from dataclasses import replace
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Any

import httpx

from billing_client_core.errors.models import ErrorKind, ErrorParam, ErrorRecord

_STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.VALIDATION,
    401: ErrorKind.AUTHORIZATION,
    403: ErrorKind.AUTHORIZATION,
    404: ErrorKind.NOT_FOUND,
    409: ErrorKind.CONFLICT,
    422: ErrorKind.VALIDATION,
    429: ErrorKind.RATE_LIMITED,
}


def kind_for_status(status_code: int) -> ErrorKind:
    """Select the coarse error kind for a non-2xx status code."""
    if status_code in _STATUS_KINDS:
        return _STATUS_KINDS[status_code]
    if 400 <= status_code < 500:
        return ErrorKind.CLIENT
    if 500 <= status_code < 600:
        return ErrorKind.SERVER
    return ErrorKind.UNEXPECTED


def _parse_body(body: Any) -> tuple[dict | None, str]:
    """Return (json object or None, raw text) for a response body."""
    if body is None:
        return None, ""
    if isinstance(body, dict):
        return body, ""
    if isinstance(body, bytes):
        body = body.decode("utf-8", errors="replace")
    if not isinstance(body, str):
        return None, ""
    try:
        data = json.loads(body)
    except ValueError:
        return None, body
    return (data if isinstance(data, dict) else None), body


def map_error(status_code: int, body: Any = None) -> ErrorRecord:
    """Map a non-2xx status and its body to an `ErrorRecord`.

    The body may be a decoded JSON object, raw text/bytes, or None. The error
    envelope is either top level (`{"type", "message", "params"}`) or nested
    under `"error"`. Its fields are copied verbatim and every `params` entry
    is kept. Without a usable envelope the message is `"HTTP <status>"`.

    Args:
        status_code: HTTP status code
        body: Response body

    Returns:
        ErrorRecord for the failure
    """
    kind = kind_for_status(status_code)
    data, text = _parse_body(body)

    envelope = None
    if data is not None:
        nested = data.get("error")
        envelope = nested if isinstance(nested, dict) else data
        if not any(key in envelope for key in ("type", "message", "params")):
            envelope = None

    if envelope is None:
        snippet = text.strip()[:200]
        message = f"HTTP {status_code}: {snippet}" if snippet else f"HTTP {status_code}"
        return ErrorRecord(kind=kind, http_status=status_code, message=message)

    raw_params = envelope.get("params") or []
    if not isinstance(raw_params, list):
        raw_params = [raw_params]

    return ErrorRecord(
        kind=kind,
        http_status=status_code,
        message=str(envelope.get("message") or f"HTTP {status_code}"),
        params=tuple(ErrorParam.from_dict(item) for item in raw_params),
        error_type=envelope.get("type"),
    )


def parse_retry_after(value: str | None) -> float | None:
    """Parse a Retry-After header.

    Supports both formats:
    - Delay-seconds: "120"
    - HTTP-date: "Wed, 21 Oct 2015 07:28:00 GMT"

    Returns:
        Delay in seconds, or None if the header is missing, invalid or in the past
    """
    if not value:
        return None

    try:
        delay = float(value)
    except ValueError:
        pass
    else:
        return delay if delay >= 0 else None

    try:
        delay = (parsedate_to_datetime(value) - datetime.now(UTC)).total_seconds()
    except (ValueError, TypeError):
        return None

    # Protect against negative delays (clock skew)
    return delay if delay >= 0 else None


def error_from_response(response: httpx.Response) -> ErrorRecord:
    """Build an `ErrorRecord` from an httpx response.

    Args:
        response: Non-2xx HTTP response (already read)

    Returns:
        ErrorRecord, with `retry_after` filled in for 429 responses
    """
    record = map_error(response.status_code, response.content or None)
    if record.kind is ErrorKind.RATE_LIMITED:
        retry_after = parse_retry_after(response.headers.get("retry-after"))
        if retry_after is not None:
            return replace(record, retry_after=retry_after)
    return record


def transport_error(exc: httpx.RequestError) -> ErrorRecord:
    """Build an `ErrorRecord` for a request that produced no usable response.

    Network failures (`httpx.TransportError`) are TRANSPORT and retryable.
    Anything else httpx raises while sending or reading, such as a body it
    cannot decode or too many redirects, is UNEXPECTED.
    """
    kind = ErrorKind.TRANSPORT if isinstance(exc, httpx.TransportError) else ErrorKind.UNEXPECTED
    return ErrorRecord(
        kind=kind,
        http_status=None,
        message=f"{type(exc).__name__}: {exc}" if str(exc) else type(exc).__name__,
    )
