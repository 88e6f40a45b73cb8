"""Billing API client.

`BillingClient` exposes every entry of the operation table as a method:

    ```python
    from billing_client_core import BillingClient, ClientConfig, ErrorKind, ListOptions

    with BillingClient(ClientConfig.from_env()) as client:
        account = client.get_account(account_id="code-bob").unwrap().data

        for invoice in client.list_account_invoices(account_id="code-bob", options=ListOptions(limit=200)):
            ...

        result = client.create_account(body={"code": "alice"})
        if not result.ok and result.error.kind is ErrorKind.VALIDATION:
            for param in result.error.params:
                print(param.param, param.message)
    ```

Single calls return a `Result[ApiResponse]`; list calls return a `Pager`.
"""

import functools
import logging
from typing import Any

from billing_client_core.codec import ResourceCodec
from billing_client_core.config import ClientConfig
from billing_client_core.operations import OPERATIONS, Operation, get_operation
from billing_client_core.options import ListOptions
from billing_client_core.pager import Pager
from billing_client_core.paths import build_path, template_parameters
from billing_client_core.request import RequestDescriptor
from billing_client_core.result import Result
from billing_client_core.transport.executor import ApiResponse, TransportExecutor
from billing_client_core.transport.retry import RetryPolicy

logger = logging.getLogger(__name__)


class BillingClient:
    """Client scoped to one site.

    Args:
        config: Client configuration; its site ID scopes every path
        executor: Executor to use instead of building one from `config`
        transport: httpx transport for the built executor
        codec: Resource codec for the built executor
        retry_policy: Retry policy for the built executor
    """

    def __init__(
        self,
        config: ClientConfig,
        *,
        executor: TransportExecutor | None = None,
        transport=None,
        codec: ResourceCodec | None = None,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        self.config = config
        self.site = config.site
        self.executor = executor or TransportExecutor(
            config, transport=transport, codec=codec, retry_policy=retry_policy
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        self.executor.close()

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in OPERATIONS:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        return functools.partial(self.call, name)

    def __dir__(self):
        return sorted(set(super().__dir__()) | set(OPERATIONS))

    def call(
        self,
        operation_name: str,
        *,
        body: Any = None,
        options: ListOptions | None = None,
        idempotency_key: str | None = None,
        timeout: float | None = None,
        **path_params: str,
    ) -> "Result[ApiResponse] | Pager":
        """Invoke an operation from the table.

        Args:
            operation_name: Operation name, e.g. "get_account"
            body: Request body for create/update operations
            options: Query options; must be accepted by the operation
            idempotency_key: Idempotency key for POST operations
            timeout: Call deadline (per page for list operations)
            **path_params: Identifier parameters of the path template

        Returns:
            Pager for list operations, otherwise Result[ApiResponse]

        Raises:
            UnknownOperationError: Unknown operation name
            UnknownOptionError: Option not accepted by the operation
            MissingParameterError: Path parameter missing
            MissingBodyFieldError: Body missing or lacking required fields
            TypeError: Unexpected path parameter
        """
        operation = get_operation(operation_name)
        request = self.request_for(operation, body=body, options=options, idempotency_key=idempotency_key, **path_params)
        logger.debug(f"{operation.name}: {request.method.value} {request.path}")

        if operation.paginated:
            return Pager(self.executor, request, timeout=timeout)
        return self.executor.execute(request, timeout=timeout)

    def request_for(
        self,
        operation: Operation,
        *,
        body: Any = None,
        options: ListOptions | None = None,
        idempotency_key: str | None = None,
        **path_params: str,
    ) -> RequestDescriptor:
        """Build the request descriptor for an operation (no I/O)."""
        accepted = set(template_parameters(operation.path)) - {"site_id"}
        unexpected = sorted(set(path_params) - accepted)
        if unexpected:
            raise TypeError(f"{operation.name}() got unexpected keyword argument(s): {', '.join(unexpected)}")

        if operation.body_type is None and body is not None:
            raise TypeError(f"{operation.name}() does not take a body")
        operation.check_body(body)

        query = ()
        if options is not None:
            options.check_accepted(operation.name, operation.options)
            query = options.to_query()

        path = build_path(operation.path, {**path_params, **self.site.path_params()})
        return RequestDescriptor(operation.method, path, query, body=body, idempotency_key=idempotency_key)

    def get(self, path: str, *, options: ListOptions | None = None, timeout: float | None = None) -> Result[ApiResponse]:
        """GET an already-built path (for operations not in the table)."""
        query = options.to_query() if options else ()
        return self.executor.execute(RequestDescriptor.get(path, query), timeout=timeout)

    def pager(self, path: str, *, options: ListOptions | None = None, timeout: float | None = None) -> Pager:
        """Pager over an already-built list path."""
        query = options.to_query() if options else ()
        return Pager(self.executor, RequestDescriptor.get(path, query), timeout=timeout)
