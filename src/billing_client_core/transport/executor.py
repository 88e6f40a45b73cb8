"""Request execution: auth, headers, retries and the call deadline.

`TransportExecutor` sends a `RequestDescriptor` through a pooled
`httpx.Client` and returns a `Result`: either an `ApiResponse` or the
`ErrorRecord` of the failure. It never raises for API or network failures.

Example:
    ```python
    from billing_client_core.config import ClientConfig
    from billing_client_core.request import RequestDescriptor
    from billing_client_core.transport.executor import TransportExecutor

    config = ClientConfig.from_env()
    with TransportExecutor(config) as executor:
        result = executor.execute(RequestDescriptor.get("/sites/subdomain-acme/accounts/code-bob"))
        if result.ok:
            print(result.value.data)
        else:
            print(result.error.kind, result.error.params)
    ```

The deadline covers the whole call: every attempt gets only the time that
is left, and a backoff that would end past the deadline is not taken.
httpx applies that time to each phase of an attempt (connect, write, pool,
and read between chunks), so one slow attempt can still finish after the
deadline. Its response is kept if it succeeded; a failure that arrives
after the deadline is reported as TIMEOUT instead of being retried.
"""

import logging
import platform
import time
import uuid
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, replace
from typing import Any

import httpx

from billing_client_core import __version__
from billing_client_core.codec import JsonCodec, ResourceCodec
from billing_client_core.config import ClientConfig
from billing_client_core.errors.handler import error_from_response, transport_error
from billing_client_core.errors.models import ErrorKind, ErrorRecord
from billing_client_core.request import HttpMethod, RequestDescriptor
from billing_client_core.result import Result
from billing_client_core.transport.retry import RetryPolicy

logger = logging.getLogger(__name__)

IDEMPOTENCY_KEY_HEADER = "Idempotency-Key"
REQUEST_ID_HEADER = "X-Request-Id"


def default_user_agent() -> str:
    return f"billing-client-core/{__version__} python/{platform.python_version()} httpx/{httpx.__version__}"


@dataclass(frozen=True)
class PageInfo:
    """Pagination metadata of a list response.

    The server gives either a next-page URL (embedded `next` field or a
    `Link: <...>; rel="next"` header) or a bare cursor token. Neither means
    this was the last page.
    """

    next_url: str | None = None
    cursor: str | None = None

    @property
    def has_more(self) -> bool:
        return self.next_url is not None or self.cursor is not None

    @classmethod
    def from_response(cls, response: httpx.Response, payload: Any) -> "PageInfo":
        link = response.links.get("next", {}).get("url")
        if not isinstance(payload, dict):
            return cls(next_url=link)

        if payload.get("has_more") is False:
            return cls()

        embedded = payload.get("next") or payload.get("next_cursor")
        if not embedded or not isinstance(embedded, str):
            return cls(next_url=link)
        if embedded.startswith(("/", "http://", "https://")):
            return cls(next_url=embedded)
        return cls(cursor=embedded)


def is_list_payload(payload: Any) -> bool:
    """Whether a decoded body is a list envelope (or a bare JSON array)."""
    if isinstance(payload, list):
        return True
    if not isinstance(payload, dict) or not isinstance(payload.get("data"), list):
        return False
    return payload.get("object") == "list" or "has_more" in payload or "next" in payload


@dataclass(frozen=True)
class ApiResponse:
    """Decoded successful response.

    Attributes:
        status_code: HTTP status code
        data: Decoded record, list of decoded records (list endpoints) or None
        page: Pagination metadata, only set for list responses
        headers: Response headers
        retries: Number of retries performed before this response
        request_id: Server request ID, if sent
    """

    status_code: int
    data: Any = None
    page: PageInfo | None = None
    headers: Mapping[str, str] = field(default_factory=dict)
    retries: int = 0
    request_id: str | None = None

    @property
    def records(self) -> list:
        return self.data if isinstance(self.data, list) else []


class TransportExecutor:
    """Send request descriptors with auth, retries and a call deadline.

    One executor owns one `httpx.Client` (and its connection pool). It is
    safe to share between threads.

    Args:
        config: Client configuration (credentials, base URL, retry settings)
        retry_policy: Overrides the policy derived from `config`
        codec: Resource codec for request and response bodies (default: JsonCodec)
        transport: httpx transport to use (tests pass `httpx.MockTransport`)
        clock: Monotonic clock used for the deadline
        sleep: Sleep function used between attempts
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        retry_policy: RetryPolicy | None = None,
        codec: ResourceCodec | None = None,
        transport: httpx.BaseTransport | None = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.config = config
        self.retry_policy = retry_policy or RetryPolicy(
            max_attempts=config.max_attempts,
            backoff_factor=config.backoff_factor,
            max_backoff=config.max_backoff,
            jitter=config.jitter,
        )
        self.codec = codec or JsonCodec()
        self._clock = clock
        self._sleep = sleep
        self._client = httpx.Client(
            base_url=config.base_url,
            auth=httpx.BasicAuth(config.api_key, ""),
            headers={
                "Accept": "application/json",
                "User-Agent": config.user_agent or default_user_agent(),
            },
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the underlying connection pool."""
        self._client.close()

    @property
    def base_path(self) -> str:
        """Path part of the base URL without its trailing slash, e.g. "/v2" (or "")."""
        return self._client.base_url.path.rstrip("/")

    def execute(self, request: RequestDescriptor, *, timeout: float | None = None) -> Result[ApiResponse]:
        """Send a request, retrying per the retry policy.

        Args:
            request: What to send
            timeout: Call deadline in seconds, covering all attempts.
                Defaults to `config.timeout`.

        Returns:
            Result holding an ApiResponse, or the ErrorRecord of the failure
        """
        budget = self.config.timeout if timeout is None else timeout
        deadline = self._clock() + budget
        idempotency_key = self._idempotency_key(request)
        eligible = self.retry_policy.is_eligible(request, idempotency_key)

        attempt = 0
        error: ErrorRecord | None = None

        while True:
            remaining = deadline - self._clock()
            if remaining <= 0:
                return Result.failure(self._deadline_exceeded(budget, attempt, error))

            attempt += 1
            try:
                response = self._send(request, idempotency_key, remaining)
            except httpx.RequestError as e:
                error = transport_error(e)
                if isinstance(e, httpx.TimeoutException) and self._clock() >= deadline:
                    return Result.failure(self._deadline_exceeded(budget, attempt, error))
            else:
                if response.is_success:
                    return self._decode(response, retries=attempt - 1)
                error = error_from_response(response)

            retries = attempt - 1
            if not self.retry_policy.should_retry(error, attempt, eligible=eligible):
                if eligible and retries and self.retry_policy.is_retryable(error):
                    logger.debug(f"Request {request.method.value} {request.path} gave up after {attempt} attempts")
                    return Result.failure(self._retries_exhausted(error, retries))
                logger.debug(f"Request {request.method.value} {request.path} failed: {error.kind.value}")
                return Result.failure(replace(error, retries=retries))

            delay = self.retry_policy.backoff_delay(attempt, error)
            if self._clock() + delay >= deadline:
                return Result.failure(self._deadline_exceeded(budget, attempt, error))

            logger.warning(
                f"Request {request.method.value} {request.path} failed with "
                f"{error.http_status or error.message}, retrying in {delay:.2f}s "
                f"(attempt {attempt}/{self.retry_policy.max_attempts})"
            )
            self._sleep(delay)

    def _idempotency_key(self, request: RequestDescriptor) -> str | None:
        if request.idempotency_key is not None:
            return request.idempotency_key
        if request.method is HttpMethod.POST and self.config.generate_idempotency_keys:
            return str(uuid.uuid4())
        return None

    def _send(self, request: RequestDescriptor, idempotency_key: str | None, timeout: float) -> httpx.Response:
        headers = {IDEMPOTENCY_KEY_HEADER: idempotency_key} if idempotency_key else None
        http_request = self._client.build_request(
            request.method.value,
            request.path,
            params=list(request.query) or None,
            json=self.codec.encode(request.body) if request.body is not None else None,
            headers=headers,
            timeout=timeout,
        )
        # send() reads the body, so the connection goes back to the pool here
        return self._client.send(http_request)

    def _decode(self, response: httpx.Response, *, retries: int) -> Result[ApiResponse]:
        try:
            payload = response.json() if response.content else None
        except ValueError:
            return Result.failure(
                ErrorRecord(
                    kind=ErrorKind.UNEXPECTED,
                    http_status=response.status_code,
                    message=f"Response body is not valid JSON: {response.text[:200]}",
                    retries=retries,
                )
            )

        page = None
        if is_list_payload(payload):
            items = payload if isinstance(payload, list) else payload["data"]
            data = [self.codec.decode(item) for item in items]
            page = PageInfo.from_response(response, payload)
        elif payload is not None:
            data = self.codec.decode(payload)
        else:
            data = None

        return Result.success(
            ApiResponse(
                status_code=response.status_code,
                data=data,
                page=page,
                headers=dict(response.headers),
                retries=retries,
                request_id=response.headers.get(REQUEST_ID_HEADER),
            )
        )

    def _deadline_exceeded(self, budget: float, attempts: int, cause: ErrorRecord | None) -> ErrorRecord:
        return ErrorRecord(
            kind=ErrorKind.TIMEOUT,
            http_status=cause.http_status if cause else None,
            message=f"Call exceeded its {budget}s deadline after {attempts} attempt(s)",
            params=cause.params if cause else (),
            retries=max(attempts - 1, 0),
            cause=cause,
        )

    def _retries_exhausted(self, cause: ErrorRecord, retries: int) -> ErrorRecord:
        return ErrorRecord(
            kind=ErrorKind.RETRIES_EXHAUSTED,
            http_status=cause.http_status,
            message=f"Gave up after {retries + 1} attempts: {cause.message}",
            params=cause.params,
            error_type=cause.error_type,
            retries=retries,
            cause=cause,
        )
