"""Request execution and retry policy.

Modules:
    executor: Sends request descriptors with auth, retries and a call deadline
    retry: Retry eligibility and backoff

Example:
    ```python
    from billing_client_core.transport import RetryPolicy, TransportExecutor

    executor = TransportExecutor(config, retry_policy=RetryPolicy(max_attempts=5))
    ```
"""

from billing_client_core.transport.executor import ApiResponse, PageInfo, TransportExecutor
from billing_client_core.transport.retry import RetryPolicy

__all__ = ["ApiResponse", "PageInfo", "RetryPolicy", "TransportExecutor"]
