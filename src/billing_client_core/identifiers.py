"""Identifier resolution for resource lookup keys.

Most resources can be looked up either by their raw ID or by an alternate
key, disambiguated by a literal prefix:

| Prefix | Kind | Example |
|--------|------|---------|
| `code-` | `KeyKind.CODE` | `code-bob` |
| `uuid-` | `KeyKind.UUID` | `uuid-419c1a2b...` |
| `number-` | `KeyKind.NUMBER` | `number-1001` |

Anything else (including unknown prefixes) is a plain ID.

Example:
    ```python
    from billing_client_core.identifiers import resolve

    resolve("code-bob")  # AlternateKey(kind=KeyKind.CODE, value="bob")
    resolve("hympfmab60ic")  # PlainId(value="hympfmab60ic")
    resolve("code-bob").to_path_segment()  # "code-bob"
    ```
"""

from dataclasses import dataclass
from enum import Enum
from urllib.parse import quote


class KeyKind(str, Enum):
    """Alternate key kinds accepted in place of a raw resource ID."""

    CODE = "code"
    UUID = "uuid"
    NUMBER = "number"

    @property
    def prefix(self) -> str:
        return f"{self.value}-"


def _encode(value: str) -> str:
    return quote(value, safe="")


@dataclass(frozen=True)
class PlainId:
    """A raw resource ID, used verbatim."""

    value: str

    def to_path_segment(self) -> str:
        return _encode(self.value)

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class AlternateKey:
    """A prefixed alternate key (code, UUID or number).

    `value` holds the key with its prefix stripped. The prefix is put back
    when rendering a path segment since the server disambiguates by it.
    """

    kind: KeyKind
    value: str

    def to_path_segment(self) -> str:
        return f"{self.kind.prefix}{_encode(self.value)}"

    def __str__(self) -> str:
        return f"{self.kind.prefix}{self.value}"


Identifier = PlainId | AlternateKey


def resolve(raw: str) -> Identifier:
    """Classify a caller-supplied identifier string.

    Never fails: any input that does not start with a known prefix is a
    `PlainId`, including the empty string.

    Args:
        raw: Identifier as supplied by the caller

    Returns:
        `AlternateKey` when `raw` starts with a known prefix, else `PlainId`
    """
    for kind in KeyKind:
        if raw.startswith(kind.prefix):
            return AlternateKey(kind=kind, value=raw[len(kind.prefix) :])
    return PlainId(raw)
