"""Billing Client Core - request execution, pagination and errors for the billing API.

This library provides the machinery every billing API operation relies on:
- Transport executor with auth, idempotency keys, retries and a call deadline
- Cursor-driven, lazy `Pager` for list operations
- Uniform error taxonomy built from status codes and the JSON error envelope
- Identifier and path helpers for `/sites/{site_id}/...` routes

Example:
    ```python
    from billing_client_core import BillingClient, ClientConfig, ListOptions, Order, Sort

    # Resolve BILLING_API_KEY, BILLING_SITE_ID and BILLING_API_URL
    config = ClientConfig.from_env()

    with BillingClient(config) as client:
        result = client.get_account(account_id="code-bob")
        if result.ok:
            print(result.value.data)

        options = ListOptions(limit=200, sort=Sort.UPDATED_AT, order=Order.ASC)
        for subscription in client.list_subscriptions(options=options):
            ...
    ```
"""

__version__ = "0.1.0"

from billing_client_core.client import BillingClient  # noqa: E402
from billing_client_core.config import ClientConfig, SiteContext  # noqa: E402
from billing_client_core.errors import ErrorKind, ErrorParam, ErrorRecord  # noqa: E402
from billing_client_core.identifiers import AlternateKey, KeyKind, PlainId, resolve  # noqa: E402
from billing_client_core.options import ListOptions, Order, Sort  # noqa: E402
from billing_client_core.pager import Pager  # noqa: E402
from billing_client_core.paths import MissingParameterError, build_path  # noqa: E402
from billing_client_core.request import HttpMethod, RequestDescriptor  # noqa: E402
from billing_client_core.result import Result  # noqa: E402

__all__ = [
    "AlternateKey",
    "BillingClient",
    "ClientConfig",
    "ErrorKind",
    "ErrorParam",
    "ErrorRecord",
    "HttpMethod",
    "KeyKind",
    "ListOptions",
    "MissingParameterError",
    "Order",
    "Pager",
    "PlainId",
    "RequestDescriptor",
    "Result",
    "SiteContext",
    "Sort",
    "__version__",
    "build_path",
    "resolve",
]
