"""Credential and setting resolution.

Example:
    ```python
    from billing_client_core.auth import CredentialResolver

    resolver = CredentialResolver()
    api_key = resolver.resolve_api_key()
    ```
"""

from billing_client_core.auth.credentials import CredentialResolver
from billing_client_core.auth.exceptions import (
    CredentialError,
    CredentialFileError,
    CredentialNotFoundError,
    InvalidSettingError,
)

__all__ = [
    "CredentialError",
    "CredentialFileError",
    "CredentialNotFoundError",
    "CredentialResolver",
    "InvalidSettingError",
]
