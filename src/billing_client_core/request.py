"""Immutable description of a single API call."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any
from urllib.parse import parse_qsl, urlsplit


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"


def _normalize_query(query: Mapping[str, str] | Iterable[tuple[str, str]] | None) -> tuple[tuple[str, str], ...]:
    if query is None:
        return ()
    items = query.items() if isinstance(query, Mapping) else query
    return tuple((str(name), str(value)) for name, value in items)


@dataclass(frozen=True)
class RequestDescriptor:
    """One call: verb, resolved path, query, optional body.

    `idempotent` decides retry eligibility. GET, PUT and DELETE are always
    idempotent; POST only when the caller supplies an idempotency key.

    Attributes:
        method: HTTP method
        path: Resolved path (already expanded and encoded)
        query: Query parameters as `(name, value)` pairs
        body: Optional request body, encoded by the resource codec
        idempotency_key: Caller-supplied idempotency key, if any
    """

    method: HttpMethod
    path: str
    query: tuple[tuple[str, str], ...] = field(default=())
    body: Any = None
    idempotency_key: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "method", HttpMethod(self.method))
        object.__setattr__(self, "query", _normalize_query(self.query))

    @classmethod
    def get(cls, path: str, query=None) -> "RequestDescriptor":
        return cls(HttpMethod.GET, path, query)

    @classmethod
    def post(cls, path: str, body: Any = None, *, idempotency_key: str | None = None) -> "RequestDescriptor":
        return cls(HttpMethod.POST, path, body=body, idempotency_key=idempotency_key)

    @classmethod
    def put(cls, path: str, body: Any = None, query=None) -> "RequestDescriptor":
        return cls(HttpMethod.PUT, path, query, body=body)

    @classmethod
    def delete(cls, path: str, query=None) -> "RequestDescriptor":
        return cls(HttpMethod.DELETE, path, query)

    @classmethod
    def from_url(cls, url: str, base_path: str = "") -> "RequestDescriptor":
        """Build a GET descriptor from a server-provided (next page) URL.

        Only path and query are kept; the host always comes from the
        executor's base URL. A leading `base_path` (the base URL's own path,
        e.g. "/v2") is removed since the client adds it back.
        """
        parts = urlsplit(url)
        path = parts.path
        base_path = base_path.rstrip("/")
        if base_path and (path == base_path or path.startswith(base_path + "/")):
            path = path[len(base_path) :] or "/"
        return cls(HttpMethod.GET, path, parse_qsl(parts.query, keep_blank_values=True))

    @property
    def idempotent(self) -> bool:
        return self.method is not HttpMethod.POST or self.idempotency_key is not None

    def with_query(self, **params: str) -> "RequestDescriptor":
        """Return a copy with the given query parameters set (replacing existing ones)."""
        kept = tuple((name, value) for name, value in self.query if name not in params)
        return replace(self, query=kept + tuple(params.items()))
