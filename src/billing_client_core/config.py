"""Client configuration and site context.

Configuration is an explicit immutable value rather than module-level state,
so clients for different sites (tenants) can coexist in one process.

Example:
    ```python
    from billing_client_core.config import ClientConfig

    # Explicit
    config = ClientConfig(api_key="...", site_id="subdomain-acme", base_url="https://api.billing.test")

    # From BILLING_* environment variables / .env file
    config = ClientConfig.from_env()
    ```
"""

import logging
from dataclasses import dataclass, field

from billing_client_core.auth import CredentialResolver, InvalidSettingError

logger = logging.getLogger(__name__)

SITE_ID_ENV = "BILLING_SITE_ID"
BASE_URL_ENV = "BILLING_API_URL"
TIMEOUT_ENV = "BILLING_TIMEOUT"
MAX_ATTEMPTS_ENV = "BILLING_MAX_ATTEMPTS"


@dataclass(frozen=True)
class SiteContext:
    """Tenant scope every path is rooted at (`/sites/{site_id}/...`).

    The site may be given as a raw ID or as an alternate key such as
    `subdomain-acme`; it is embedded in paths as given (percent-encoded).
    """

    site_id: str

    def __post_init__(self):
        if not self.site_id:
            raise ValueError("site_id must not be empty")

    def path_params(self) -> dict[str, str]:
        return {"site_id": self.site_id}


@dataclass(frozen=True)
class ClientConfig:
    """Settings shared by every call a client makes.

    Attributes:
        api_key: API key, sent as the HTTP Basic user name
        site_id: Site (tenant) the client is scoped to
        base_url: API root, e.g. "https://api.billing.test"
        timeout: Call deadline in seconds, covering all retries
        max_attempts: Total attempts per call, first one included
        backoff_factor: Exponential backoff multiplier in seconds
        max_backoff: Cap for a single backoff delay in seconds
        jitter: Fraction of each delay added as random jitter
        generate_idempotency_keys: Attach a generated Idempotency-Key to
            POSTs that do not carry one, making them safe to retry
        user_agent: Overrides the default User-Agent
    """

    api_key: str = field(repr=False)
    site_id: str
    base_url: str
    timeout: float = 30.0
    max_attempts: int = 3
    backoff_factor: float = 0.5
    max_backoff: float = 10.0
    jitter: float = 0.25
    generate_idempotency_keys: bool = True
    user_agent: str | None = None

    @property
    def site(self) -> SiteContext:
        return SiteContext(self.site_id)

    @classmethod
    def from_env(
        cls,
        *,
        api_key: str | None = None,
        site_id: str | None = None,
        base_url: str | None = None,
        resolver: CredentialResolver | None = None,
        **overrides,
    ) -> "ClientConfig":
        """Build a config from explicit values, BILLING_* env vars and .env.

        Raises:
            CredentialNotFoundError: If the API key, site ID or base URL is missing.
            InvalidSettingError: If a numeric setting cannot be parsed.
        """
        resolver = resolver or CredentialResolver()

        settings = {
            "timeout": _number(resolver, TIMEOUT_ENV, float, cls.timeout),
            "max_attempts": _number(resolver, MAX_ATTEMPTS_ENV, int, cls.max_attempts),
        }
        settings.update(overrides)

        config = cls(
            api_key=resolver.resolve_api_key(api_key),
            site_id=resolver.resolve(value=site_id, env_var_name=SITE_ID_ENV, required=True, secret=False),
            base_url=resolver.resolve(value=base_url, env_var_name=BASE_URL_ENV, required=True, secret=False),
            **settings,
        )
        logger.debug(f"Loaded client config for site {config.site_id} at {config.base_url}")
        return config


def _number(resolver: CredentialResolver, env_var_name: str, convert, default):
    raw = resolver.resolve(env_var_name=env_var_name, secret=False)
    if raw is None:
        return default
    try:
        return convert(raw)
    except ValueError:
        raise InvalidSettingError(f"{env_var_name} must be a number, got {raw!r}", env_var_name=env_var_name) from None
