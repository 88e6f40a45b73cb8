"""Credential and setting resolution for the billing client.

Each setting is looked up in this order, first hit wins:

| Source | Example |
|--------|---------|
| Explicit argument | `resolver.resolve(value="...")` |
| Environment variable | `BILLING_SITE_ID=subdomain-acme` |
| `.env` file | loaded into the environment once, never overriding it |
| Default | `resolver.resolve(default="...")` |

The API key may also live in a file named by `BILLING_API_KEY_FILE`
(Docker/Kubernetes secrets). Secret values never reach the log; only the
source they were found in does.

Example:
    ```python
    from billing_client_core.auth import CredentialResolver

    resolver = CredentialResolver()
    api_key = resolver.resolve_api_key()
    site_id = resolver.resolve(env_var_name="BILLING_SITE_ID", required=True, secret=False)
    ```
"""

import logging
import os
from pathlib import Path
from threading import Lock

import dotenv

from billing_client_core.auth.exceptions import CredentialFileError, CredentialNotFoundError

logger = logging.getLogger(__name__)

API_KEY_ENV = "BILLING_API_KEY"
API_KEY_FILE_ENV = "BILLING_API_KEY_FILE"


class CredentialResolver:
    """Look up credentials and settings.

    Args:
        dotenv_path: .env file to load. None lets python-dotenv search
            upwards from the working directory.
        load_dotenv: Set to False to skip the .env file entirely.
    """

    def __init__(self, dotenv_path: str | None = None, load_dotenv: bool = True):
        self.dotenv_path = dotenv_path
        self._load_lock = Lock()
        self._loaded = not load_dotenv
        self._load_dotenv_once()

    def _load_dotenv_once(self) -> None:
        with self._load_lock:
            if self._loaded:
                return
            self._loaded = True
            try:
                found = dotenv.load_dotenv(dotenv_path=self.dotenv_path)
            except OSError as e:
                logger.warning(f"Could not read .env file {self.dotenv_path or ''}: {e}")
                return
            logger.debug(f".env file {'loaded' if found else 'not found'}")

    def resolve(
        self,
        *,
        value: str | None = None,
        env_var_name: str | None = None,
        default: str | None = None,
        required: bool = False,
        secret: bool = True,
    ) -> str | None:
        """Resolve one setting.

        Args:
            value: Explicit value; wins over every other source.
            env_var_name: Environment variable to consult.
            default: Used when no other source has a value.
            required: Raise instead of returning None.
            secret: Mask the value in debug logs.

        Returns:
            The value, or None when optional and unset.

        Raises:
            CredentialNotFoundError: If required and unset.
        """
        candidates = [
            (value, "argument"),
            (os.environ.get(env_var_name) if env_var_name else None, f"${env_var_name}"),
            (default, "default"),
        ]
        for candidate, source in candidates:
            if candidate is not None:
                shown = "***" if secret else candidate
                logger.debug(f"{env_var_name or 'setting'} = {shown} (from {source})")
                return candidate

        if required:
            hint = f"; set {env_var_name}" if env_var_name else ""
            raise CredentialNotFoundError(f"Missing required setting{hint}", env_var_name=env_var_name)
        return None

    def resolve_from_file(self, *, file_path: str | Path | None = None, required: bool = False) -> str | None:
        """Read a secret from a file, surrounding whitespace removed.

        The path may contain `~` and `$VAR`.

        Raises:
            CredentialFileError: If required and the file is missing or unreadable.
        """
        if file_path is None:
            if required:
                raise CredentialFileError("No credential file path given")
            return None

        path = Path(os.path.expandvars(str(file_path))).expanduser()
        try:
            secret = path.read_text().strip()
        except OSError as e:
            reason = "not found" if isinstance(e, FileNotFoundError) else f"unreadable ({e})"
            if required:
                raise CredentialFileError(f"Credential file {path} {reason}") from e
            logger.warning(f"Ignoring credential file {path}: {reason}")
            return None

        logger.debug(f"Read credential from {path}")
        return secret

    def resolve_api_key(self, value: str | None = None) -> str:
        """Resolve the API key: argument, `BILLING_API_KEY`, then the file in `BILLING_API_KEY_FILE`.

        Raises:
            CredentialNotFoundError: If no source provides a key.
            CredentialFileError: If the key file is configured but unreadable.
        """
        api_key = self.resolve(value=value, env_var_name=API_KEY_ENV)
        if api_key is None:
            key_file = self.resolve(env_var_name=API_KEY_FILE_ENV, secret=False)
            if key_file:
                api_key = self.resolve_from_file(file_path=key_file, required=True)
        if not api_key:
            raise CredentialNotFoundError(
                f"No API key: set {API_KEY_ENV} or point {API_KEY_FILE_ENV} at a key file", env_var_name=API_KEY_ENV
            )
        return api_key
