"""Tests for error mapping."""

from datetime import UTC, datetime, timedelta
from email.utils import format_datetime

import httpx
import pytest

from billing_client_core.errors import ErrorKind, ErrorParam, ValidationError
from billing_client_core.errors.handler import (
    error_from_response,
    kind_for_status,
    map_error,
    parse_retry_after,
    transport_error,
)


@pytest.mark.unit
@pytest.mark.parametrize(
    ("status_code", "kind"),
    [
        (400, ErrorKind.VALIDATION),
        (401, ErrorKind.AUTHORIZATION),
        (403, ErrorKind.AUTHORIZATION),
        (404, ErrorKind.NOT_FOUND),
        (409, ErrorKind.CONFLICT),
        (418, ErrorKind.CLIENT),
        (422, ErrorKind.VALIDATION),
        (429, ErrorKind.RATE_LIMITED),
        (500, ErrorKind.SERVER),
        (503, ErrorKind.SERVER),
        (302, ErrorKind.UNEXPECTED),
    ],
)
def test_kind_for_status(status_code, kind):
    """Status codes map onto the coarse error kinds."""
    assert kind_for_status(status_code) is kind


@pytest.mark.unit
def test_validation_envelope_keeps_all_params():
    """A 422 envelope is copied verbatim, including every parameter error."""
    body = {
        "error": {
            "type": "validation",
            "message": "Invalid account",
            "params": [
                {"param": "account_id", "message": "not found"},
                {"param": "email", "message": "is invalid"},
            ],
        }
    }

    record = map_error(422, body)

    assert record.kind is ErrorKind.VALIDATION
    assert record.http_status == 422
    assert record.message == "Invalid account"
    assert record.error_type == "validation"
    assert record.params == (ErrorParam("account_id", "not found"), ErrorParam("email", "is invalid"))

    with pytest.raises(ValidationError):
        raise record.to_exception()


@pytest.mark.unit
def test_top_level_envelope():
    """The envelope may also sit at the top level of the body."""
    record = map_error(409, b'{"type": "simultaneous_request", "message": "Try again"}')

    assert record.kind is ErrorKind.CONFLICT
    assert record.error_type == "simultaneous_request"
    assert record.message == "Try again"


@pytest.mark.unit
def test_unparseable_body_falls_back_to_status():
    """A non-JSON body gives a generic message and no parameter errors."""
    record = map_error(404, "<html>Not Found</html>")

    assert record.kind is ErrorKind.NOT_FOUND
    assert record.message == "HTTP 404: <html>Not Found</html>"
    assert record.params == ()


@pytest.mark.unit
def test_empty_body():
    """No body at all gives just the status in the message."""
    record = map_error(503)

    assert record.kind is ErrorKind.SERVER
    assert record.message == "HTTP 503"


@pytest.mark.unit
def test_json_without_envelope_fields():
    """A JSON object that is not an error envelope is ignored."""
    record = map_error(500, {"status": "down"})

    assert record.message == "HTTP 500"
    assert record.error_type is None


@pytest.mark.unit
def test_single_param_object_is_wrapped():
    """A lone params object is treated as a one-element list."""
    record = map_error(400, {"message": "Bad", "params": {"param": "code"}})

    assert record.params == (ErrorParam("code"),)


@pytest.mark.unit
def test_parse_retry_after_seconds():
    """Delay-seconds values are returned as floats."""
    assert parse_retry_after("2") == 2.0
    assert parse_retry_after("0") == 0.0


@pytest.mark.unit
@pytest.mark.parametrize("value", [None, "", "soon", "-5"])
def test_parse_retry_after_invalid(value):
    """Missing, garbled or negative values are ignored."""
    assert parse_retry_after(value) is None


@pytest.mark.unit
def test_parse_retry_after_http_date():
    """HTTP-date values are converted to a delay from now."""
    value = format_datetime(datetime.now(UTC) + timedelta(seconds=30), usegmt=True)

    delay = parse_retry_after(value)

    assert delay is not None
    assert 25 <= delay <= 30


@pytest.mark.unit
def test_parse_retry_after_past_date():
    """A date in the past is ignored."""
    assert parse_retry_after("Wed, 21 Oct 2015 07:28:00 GMT") is None


@pytest.mark.unit
def test_error_from_response_sets_retry_after_for_429():
    """Rate-limited responses carry the server's Retry-After."""
    response = httpx.Response(429, headers={"Retry-After": "3"}, json={"error": {"message": "slow down"}})

    record = error_from_response(response)

    assert record.kind is ErrorKind.RATE_LIMITED
    assert record.retry_after == 3.0
    assert record.message == "slow down"


@pytest.mark.unit
def test_error_from_response_ignores_retry_after_on_other_statuses():
    """Retry-After is only read for 429 responses."""
    response = httpx.Response(503, headers={"Retry-After": "3"})

    assert error_from_response(response).retry_after is None


@pytest.mark.unit
def test_transport_error():
    """Network failures map to TRANSPORT without a status."""
    record = transport_error(httpx.ConnectError("connection refused"))

    assert record.kind is ErrorKind.TRANSPORT
    assert record.http_status is None
    assert record.message == "ConnectError: connection refused"


@pytest.mark.unit
def test_decoding_error_is_unexpected():
    """Failures httpx raises outside the network layer are not retryable."""
    record = transport_error(httpx.DecodingError("Error -3 while decompressing data"))

    assert record.kind is ErrorKind.UNEXPECTED
    assert not record.kind.retryable
    assert record.http_status is None


@pytest.mark.unit
def test_too_many_redirects_is_unexpected():
    """A redirect loop is reported rather than retried."""
    record = transport_error(httpx.TooManyRedirects("Exceeded maximum allowed redirects."))

    assert record.kind is ErrorKind.UNEXPECTED
