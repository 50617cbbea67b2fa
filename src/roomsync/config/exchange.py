"""Exchange Online admin API configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import env_flag, optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig
from .storage import get_storage_config

AUTHORITY_URL = "https://login.microsoftonline.com"
EXCHANGE_URL = "https://outlook.office365.com"
EXCHANGE_TIMEOUT_SECONDS = 60.0
# Cached directory reads are only meant for repeated dry runs
EXCHANGE_CACHE_TTL_SECONDS = 15 * 60.0


@dataclass(frozen=True)
class ExchangeConfig:
    """Holds app-only credentials and endpoints for the admin API."""

    tenant_id: str
    client_id: str
    client_secret: str
    resilience: ResilienceConfig
    authority_url: str = AUTHORITY_URL
    exchange_url: str = EXCHANGE_URL

    @property
    def token_url(self) -> str:
        return f"{self.authority_url.rstrip('/')}/{self.tenant_id}/oauth2/v2.0/token"

    @property
    def scope(self) -> str:
        return f"{self.exchange_url.rstrip('/')}/.default"

    @property
    def invoke_url(self) -> str:
        return f"{self.exchange_url.rstrip('/')}/adminapi/beta/{self.tenant_id}/InvokeCommand"


def default_exchange_resilience(*, cache: bool = False) -> ResilienceConfig:
    cache_config = (
        CacheConfig(
            sqlite_path=str(get_storage_config().http_cache_path()),
            ttl_seconds=EXCHANGE_CACHE_TTL_SECONDS,
        )
        if cache
        else None
    )
    return ResilienceConfig(
        name="exchange",
        timeout_seconds=EXCHANGE_TIMEOUT_SECONDS,
        ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
        cache=cache_config,
        default_headers={"Accept": "application/json"},
    )


def get_exchange_config(*, resilience: ResilienceConfig | None = None) -> ExchangeConfig:
    values = require_env_vars(
        ("ROOMSYNC_TENANT_ID", "ROOMSYNC_CLIENT_ID", "ROOMSYNC_CLIENT_SECRET")
    )
    return ExchangeConfig(
        tenant_id=values["ROOMSYNC_TENANT_ID"],
        client_id=values["ROOMSYNC_CLIENT_ID"],
        client_secret=values["ROOMSYNC_CLIENT_SECRET"],
        resilience=resilience
        or default_exchange_resilience(cache=env_flag("ROOMSYNC_HTTP_CACHE")),
        authority_url=optional_env_var("ROOMSYNC_AUTHORITY_URL", AUTHORITY_URL) or AUTHORITY_URL,
        exchange_url=optional_env_var("ROOMSYNC_EXCHANGE_URL", EXCHANGE_URL) or EXCHANGE_URL,
    )
