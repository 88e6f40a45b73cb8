"""Testing utilities for code built on the billing client.

Example:
    ```python
    from billing_client_core.testing import FakeClock, ScriptedTransport, error_response, json_response, make_config
    from billing_client_core.transport import TransportExecutor


    def test_retries_then_succeeds():
        clock = FakeClock()
        transport = ScriptedTransport(error_response(503), json_response(data={"id": "abc"}))
        executor = TransportExecutor(make_config(), transport=transport, clock=clock, sleep=clock.sleep)

        result = executor.execute(RequestDescriptor.get("/sites/s/accounts/abc"))

        assert result.ok and result.value.retries == 1
    ```
"""

from collections.abc import Callable, Sequence
from typing import Any

import httpx

from billing_client_core.config import ClientConfig

Step = httpx.Response | Exception | Callable[[httpx.Request], httpx.Response]


class FakeClock:
    """Manually advanced monotonic clock; `sleep` advances it instead of blocking."""

    def __init__(self, start: float = 0.0):
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


class ScriptedTransport(httpx.MockTransport):
    """Mock transport that replays responses (or raises exceptions) in order.

    Every request is recorded in `requests`. With a clock, each request
    advances it by `latency` seconds before its step is replayed.
    """

    def __init__(self, *steps: Step, clock: FakeClock | None = None, latency: float = 0.0):
        self.steps = list(steps)
        self.requests: list[httpx.Request] = []
        self.clock = clock
        self.latency = latency
        super().__init__(self._handle)

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def _handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.clock is not None:
            self.clock.advance(self.latency)
        if not self.steps:
            raise AssertionError(f"Unexpected request {request.method} {request.url}")

        step = self.steps.pop(0)
        if isinstance(step, Exception):
            raise step
        if callable(step):
            return step(request)
        return step


def json_response(status_code: int = 200, data: Any = None, headers: dict[str, str] | None = None) -> httpx.Response:
    if data is None:
        return httpx.Response(status_code, headers=headers)
    return httpx.Response(status_code, json=data, headers=headers)


def list_response(records: Sequence[Any], next: str | None = None, headers: dict[str, str] | None = None) -> httpx.Response:
    """A list envelope; `next` is the next page URL (None on the last page)."""
    payload = {"object": "list", "has_more": next is not None, "next": next, "data": list(records)}
    return httpx.Response(200, json=payload, headers=headers)


def error_response(
    status_code: int,
    *,
    type: str | None = None,
    message: str | None = None,
    params: Sequence[dict[str, str]] | None = None,
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """An error response; without `type`/`message`/`params` the body is plain text."""
    if type is None and message is None and params is None:
        return httpx.Response(status_code, text="error", headers=headers)
    error = {"type": type, "message": message, "params": list(params or [])}
    return httpx.Response(status_code, json={"error": error}, headers=headers)


def make_config(**overrides: Any) -> ClientConfig:
    """A ClientConfig for tests (no environment lookups, no jitter)."""
    settings = {
        "api_key": "test-api-key",
        "site_id": "subdomain-test",
        "base_url": "https://api.billing.test",
        "jitter": 0.0,
    }
    settings.update(overrides)
    return ClientConfig(**settings)


__all__ = [
    "FakeClock",
    "ScriptedTransport",
    "error_response",
    "json_response",
    "list_response",
    "make_config",
]
