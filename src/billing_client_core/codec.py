"""Resource codec seam.

Per-resource schemas are generated elsewhere; the core only needs something
that turns a request body into JSON-compatible data and a decoded JSON
object into a record. `JsonCodec` is the default and works with plain
dicts, dataclasses and objects exposing `to_dict()`.
"""

import dataclasses
from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ResourceCodec(Protocol):
    """Protocol for (de)serialising request and response bodies."""

    def encode(self, body: Any) -> Any:
        """Convert a request body to JSON-compatible data."""
        ...

    def decode(self, data: Any) -> Any:
        """Convert one decoded JSON object into a record."""
        ...


class JsonCodec:
    """Pass-through codec for JSON-compatible bodies."""

    def encode(self, body: Any) -> Any:
        if hasattr(body, "to_dict"):
            return body.to_dict()
        if dataclasses.is_dataclass(body) and not isinstance(body, type):
            return {k: v for k, v in dataclasses.asdict(body).items() if v is not None}
        if isinstance(body, Mapping):
            return dict(body)
        return body

    def decode(self, data: Any) -> Any:
        return data
