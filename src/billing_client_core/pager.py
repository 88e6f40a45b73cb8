"""Lazy, cursor-driven iteration over list endpoints.

A `Pager` wraps the initial list request and fetches pages on demand, each
one from the "next" metadata of the page before it. The server decides
ordering and position; the pager never computes offsets.

Properties callers should know about:
    * Forward-only and not restartable. Build a new pager to iterate again.
    * No total count up front: the sequence is finite but its size is only
      known once it ends.
    * Records come in server order. With `sort=updated_at&order=desc`,
      records updated mid-iteration can move behind the cursor and be
      missed; sort ascending when that matters.
    * An `ids=` filtered call returns a single page without next metadata.

Example:
    ```python
    pager = client.list_accounts(options=ListOptions(limit=200, sort=Sort.UPDATED_AT, order=Order.ASC))

    # Pull-based
    while (result := pager.advance()).ok and result.value is not None:
        for account in result.value:
            ...
    if not result.ok:
        print(result.error)

    # Or as an iterator; failures raise the mapped APIError
    for account in client.list_accounts():
        ...
    ```
"""

import logging
from collections import deque
from collections.abc import Iterator
from typing import TYPE_CHECKING, Generic, TypeVar

from billing_client_core.errors.models import ErrorRecord
from billing_client_core.request import RequestDescriptor
from billing_client_core.result import Result

if TYPE_CHECKING:
    from billing_client_core.transport.executor import PageInfo, TransportExecutor

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Pager(Generic[T]):
    """Forward-only sequence of records spanning multiple pages.

    Args:
        executor: Executor used for every page fetch
        request: The initial list request
        timeout: Deadline for each page fetch (default: the executor's)
    """

    def __init__(self, executor: "TransportExecutor", request: RequestDescriptor, *, timeout: float | None = None):
        self._executor = executor
        self._initial_request = request
        self._timeout = timeout
        self._next_request: RequestDescriptor | None = request
        self._buffer: deque[T] = deque()
        self._exhausted = False
        self._error: ErrorRecord | None = None
        self._requests_issued = 0

    @property
    def exhausted(self) -> bool:
        """True once the last page has been fetched."""
        return self._exhausted

    @property
    def failed(self) -> bool:
        return self._error is not None

    @property
    def error(self) -> ErrorRecord | None:
        """The failure that ended iteration, if any."""
        return self._error

    @property
    def requests_issued(self) -> int:
        return self._requests_issued

    def advance(self) -> Result[list[T] | None]:
        """Fetch the next page.

        Returns:
            The page's records; `None` once the pager is exhausted; or the
            failure. After a failure the same failure is returned forever
            and no further requests are made.
        """
        if self._error is not None:
            return Result.failure(self._error)
        if self._exhausted:
            return Result.success(None)

        request = self._next_request
        result = self._executor.execute(request, timeout=self._timeout)
        self._requests_issued += 1

        if not result.ok:
            logger.debug(f"Page fetch {request.path} failed after {self._requests_issued} request(s)")
            self._error = result.error
            self._next_request = None
            return Result.failure(result.error)

        response = result.value
        self._next_request = self._next_page_request(request, response.page)
        if self._next_request is None:
            self._exhausted = True
        return Result.success(response.records)

    def _next_page_request(self, current: RequestDescriptor, page: "PageInfo | None") -> RequestDescriptor | None:
        if page is None or not page.has_more:
            return None
        if page.next_url is not None:
            next_request = RequestDescriptor.from_url(page.next_url, self._executor.base_path)
        else:
            next_request = self._initial_request.with_query(cursor=page.cursor)

        if next_request == current:
            logger.warning(f"Server returned the same next page for {current.path}; stopping iteration")
            return None
        return next_request

    def __iter__(self) -> Iterator[T]:
        return self

    def __next__(self) -> T:
        while not self._buffer:
            records = self.advance().unwrap()
            if records is None:
                raise StopIteration
            self._buffer.extend(records)
        return self._buffer.popleft()

    def pages(self) -> Iterator[list[T]]:
        """Yield whole pages; failures raise the mapped APIError."""
        while (records := self.advance().unwrap()) is not None:
            yield records

    def first(self) -> Result[T | None]:
        """Fetch only the first record, with `limit=1`.

        Uses a separate request and leaves this pager's position untouched.
        """
        result = self._executor.execute(self._initial_request.with_query(limit="1"), timeout=self._timeout)
        if not result.ok:
            return Result.failure(result.error)
        records = result.value.records
        return Result.success(records[0] if records else None)
