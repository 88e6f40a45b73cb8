"""Exceptions raised while resolving credentials and client settings.

Example:
    ```python
    from billing_client_core.auth.exceptions import CredentialNotFoundError

    try:
        config = ClientConfig.from_env()
    except CredentialNotFoundError as e:
        print(f"Set {e.env_var_name} to use the billing client")
    ```
"""


class CredentialError(Exception):
    """Base exception for credential and setting resolution errors."""

    pass


class CredentialNotFoundError(CredentialError):
    """Raised when a required credential or setting cannot be resolved.

    Attributes:
        env_var_name: The environment variable that was checked (if any).
    """

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name


class CredentialFileError(CredentialError):
    """Raised when a credential file cannot be read."""

    pass


class InvalidSettingError(CredentialError):
    """Raised when a resolved setting cannot be converted to its type."""

    def __init__(self, message: str, env_var_name: str | None = None):
        super().__init__(message)
        self.env_var_name = env_var_name
