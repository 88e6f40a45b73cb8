"""Typed options for list (and a few single-resource) calls.

List endpoints share a standard set of query parameters plus a handful of
resource-specific filters. Instead of forwarding arbitrary keyword arguments,
callers build a `ListOptions` value; unknown keywords fail at construction
and options an operation does not accept fail before any request is sent.

Notes on the standard parameters:
    * `ids` cannot be combined with ordering or filtering parameters. The
      server ignores unknown IDs and returns a single, unordered page.
    * `limit` is bounded 1-200 by the server.
    * Sort by `updated_at` ascending. In descending order records that are
      updated mid-iteration move behind the cursor and can be missed.
    * `begin_time`/`end_time` are ISO-8601; naive datetimes are sent as UTC.

None of this is validated client side beyond type coercion.
"""

from collections.abc import Collection, Sequence
from dataclasses import dataclass, fields
from datetime import UTC, datetime
from enum import Enum
from typing import Any


class UnknownOptionError(TypeError):
    """Raised when an option is not accepted by the operation being called."""

    def __init__(self, operation: str, options: list[str]):
        super().__init__(f"{operation} does not accept option(s): {', '.join(options)}")
        self.operation = operation
        self.options = options


class Order(str, Enum):
    ASC = "asc"
    DESC = "desc"


class Sort(str, Enum):
    CREATED_AT = "created_at"
    UPDATED_AT = "updated_at"


# Parameters shared by nearly every list endpoint
STANDARD_LIST_OPTIONS: frozenset[str] = frozenset(["ids", "limit", "order", "sort", "begin_time", "end_time"])


@dataclass(frozen=True)
class ListOptions:
    """Recognised query options.

    Every field defaults to `None`, meaning "not sent".
    """

    ids: Sequence[str] | None = None
    limit: int | None = None
    order: Order | str | None = None
    sort: Sort | str | None = None
    begin_time: datetime | str | None = None
    end_time: datetime | str | None = None
    state: str | None = None
    type: str | None = None
    success: bool | None = None
    subscriber: bool | None = None
    past_due: bool | None = None
    original: bool | None = None
    refund: str | None = None

    def provided(self) -> list[str]:
        """Names of the options that were set."""
        return [f.name for f in fields(self) if getattr(self, f.name) is not None]

    def check_accepted(self, operation: str, accepted: Collection[str]) -> None:
        """Raise `UnknownOptionError` if any set option is not in `accepted`."""
        rejected = [name for name in self.provided() if name not in accepted]
        if rejected:
            raise UnknownOptionError(operation, rejected)

    def to_query(self) -> tuple[tuple[str, str], ...]:
        """Render the set options as query parameters."""
        return tuple((name, coerce_query_value(getattr(self, name))) for name in self.provided())


def coerce_query_value(value: Any) -> str:
    """Coerce an option value to its wire representation."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return ",".join(str(item) for item in value)
    return str(value)
