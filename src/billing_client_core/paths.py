"""Path template expansion.

Templates use `{name}` placeholders, e.g.
`/sites/{site_id}/accounts/{account_id}/invoices`. Each value is
percent-encoded on its own before substitution, so a `/` inside an
identifier can never change the route.
"""

import re
from collections.abc import Mapping

from billing_client_core.identifiers import AlternateKey, Identifier, PlainId, resolve

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


class MissingParameterError(LookupError):
    """Raised when a path template placeholder has no value."""

    def __init__(self, template: str, missing: list[str]):
        super().__init__(f"Missing path parameter(s) {', '.join(missing)} for template {template!r}")
        self.template = template
        self.missing = missing


def template_parameters(template: str) -> list[str]:
    """Return placeholder names in the order they appear in the template."""
    return _PLACEHOLDER.findall(template)


def build_path(template: str, params: Mapping[str, str | Identifier]) -> str:
    """Expand a path template.

    String values go through the identifier resolver, so `code-bob` keeps
    its prefix and `a/b` becomes `a%2Fb`. Parameters that the template does
    not mention are ignored.

    Args:
        template: Path template with `{name}` placeholders
        params: Placeholder values

    Returns:
        Expanded path

    Raises:
        MissingParameterError: If any placeholder has no value (or `None`)
    """
    missing = [name for name in template_parameters(template) if params.get(name) is None]
    if missing:
        raise MissingParameterError(template, missing)

    def substitute(match: re.Match) -> str:
        value = params[match.group(1)]
        if not isinstance(value, (PlainId, AlternateKey)):
            value = resolve(str(value))
        return value.to_path_segment()

    return _PLACEHOLDER.sub(substitute, template)
