"""Retry policy for the transport executor.

A call is retried only when it is safe to repeat and the failure is
transient:

| Failure | Idempotent call (GET/PUT/DELETE, keyed POST) | Unkeyed POST |
|---------|----------------------------------------------|--------------|
| Network error / timeout | Retry | No retry |
| 429 Too Many Requests | Retry (honours Retry-After) | No retry |
| 5xx | Retry | No retry |
| Any other 4xx | No retry | No retry |

`max_attempts` counts every attempt, the first one included. Backoff is
exponential with random jitter:

    delay = min(backoff_factor * 2 ** (retry - 1), max_backoff)
    delay += uniform(0, jitter * delay)

## Example

```python
from billing_client_core.transport.retry import RetryPolicy

policy = RetryPolicy(max_attempts=5, backoff_factor=1.0, max_backoff=30)
executor = TransportExecutor(config, retry_policy=policy)
```
"""

import random

from billing_client_core.errors.models import ErrorRecord
from billing_client_core.request import RequestDescriptor


class RetryPolicy:
    """Decides whether and when a failed attempt is repeated.

    Args:
        max_attempts: Total attempts allowed per call, first one included (default: 3)
        backoff_factor: Multiplier for exponential backoff (default: 0.5)
        max_backoff: Maximum backoff time in seconds (default: 10)
        jitter: Fraction of the delay added as random jitter (default: 0.25)
        retry_status_codes: Restrict status-based retries to these codes.
            None (default) retries 429 and every 5xx.
    """

    def __init__(
        self,
        *,
        max_attempts: int = 3,
        backoff_factor: float = 0.5,
        max_backoff: float = 10.0,
        jitter: float = 0.25,
        retry_status_codes: frozenset[int] | None = None,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.backoff_factor = backoff_factor
        self.max_backoff = max_backoff
        self.jitter = jitter
        self.retry_status_codes = retry_status_codes

    def is_eligible(self, request: RequestDescriptor, idempotency_key: str | None = None) -> bool:
        """A call may be retried if idempotent or carrying an idempotency key."""
        return request.idempotent or idempotency_key is not None

    def is_retryable(self, error: ErrorRecord) -> bool:
        """Whether the failure itself is transient."""
        if not error.kind.retryable:
            return False
        if self.retry_status_codes is not None and error.http_status is not None:
            return error.http_status in self.retry_status_codes
        return True

    def should_retry(self, error: ErrorRecord, attempt: int, *, eligible: bool) -> bool:
        """Determine if another attempt should be made.

        Args:
            error: Classified failure of the attempt that just finished
            attempt: Number of attempts made so far (1-indexed)
            eligible: Whether the call is safe to repeat

        Returns:
            True if should retry, False otherwise
        """
        return eligible and attempt < self.max_attempts and self.is_retryable(error)

    def backoff_delay(self, retry_number: int, error: ErrorRecord | None = None) -> float:
        """Calculate the delay before the given retry.

        A Retry-After value on the error (429 responses) takes precedence
        over exponential backoff. Both are capped at `max_backoff`.

        Args:
            retry_number: Current retry (1-indexed)
            error: The failure being retried

        Returns:
            Delay in seconds
        """
        if error is not None and error.retry_after is not None:
            return min(error.retry_after, self.max_backoff)

        delay = min(self.backoff_factor * (2 ** (retry_number - 1)), self.max_backoff)
        if self.jitter:
            delay += random.uniform(0, delay * self.jitter)
        return delay
