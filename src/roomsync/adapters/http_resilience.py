"""Async HTTP client shared by the cloud adapters.

Retries happen in the transport, throttling in front of it and caching (when
enabled) around it, so callers only ever see the final response.
"""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from roomsync.config.storage import get_storage_config

if TYPE_CHECKING:
    from collections.abc import Mapping
    from types import TracebackType

    from roomsync.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)

# hishel request extension adding the request body to the cache key
CACHE_BY_BODY_EXTENSION = "hishel_body_key"


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.attempts,
        backoff_factor=policy.backoff_factor,
        backoff_jitter=policy.backoff_jitter,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after,
        allowed_methods=tuple(sorted(policy.methods)),
        status_forcelist=tuple(sorted(policy.statuses)),
        retry_on_exceptions=policy.exceptions,
    )


def _build_cache_storage(config: CacheConfig) -> AsyncSqliteStorage:
    database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    log.debug("HTTP cache enabled at %s", database_path)
    return AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=config.refresh_ttl_on_access,
    )


def _build_http_client(config: ResilienceConfig) -> httpx.AsyncClient:
    transport = RetryTransport(retry=build_retry(config.retry))
    headers = dict(config.default_headers)
    if config.cache is None:
        return httpx.AsyncClient(
            timeout=config.timeout_seconds, headers=headers, transport=transport
        )
    # FilterPolicy without filters stores every response, POSTs included
    return AsyncCacheClient(
        timeout=config.timeout_seconds,
        headers=headers,
        transport=transport,
        storage=_build_cache_storage(config.cache),
        policy=FilterPolicy(),
    )


class ResilientClient:
    """POST-only client with retries, an optional rate limit and an optional cache."""

    def __init__(self, config: ResilienceConfig) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit is not None
            else None
        )
        self._client = _build_http_client(config)

    @property
    def caching(self) -> bool:
        return self.config.cache is not None

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def post(
        self,
        url: str,
        *,
        json: object = None,
        data: Mapping[str, str] | None = None,
        headers: Mapping[str, str] | None = None,
        cache: bool = False,
    ) -> httpx.Response:
        """Send a POST through the limiter.

        ``cache`` marks a read-only call whose response may be served from the
        cache; it has no effect when caching is disabled.
        """

        extensions = {CACHE_BY_BODY_EXTENSION: True} if cache and self.caching else None
        if self._limiter is None:
            response = await self._client.post(
                url, json=json, data=data, headers=headers, extensions=extensions
            )
        else:
            async with self._limiter:
                response = await self._client.post(
                    url, json=json, data=data, headers=headers, extensions=extensions
                )
        if response.status_code == httpx.codes.TOO_MANY_REQUESTS:
            log.warning(
                "%s still throttled after retries (Retry-After=%s)",
                self.config.name,
                response.headers.get("Retry-After", "?"),
            )
        return response


__all__ = ["CACHE_BY_BODY_EXTENSION", "ResilientClient", "build_retry"]
