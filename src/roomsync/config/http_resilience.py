"""Settings for the throttled, retrying HTTP client used by cloud adapters."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from collections.abc import Mapping

# Exchange Online answers throttling with 429 and transient gateway failures with 5xx
THROTTLED_STATUSES: frozenset[int] = frozenset({429, 500, 502, 503, 504})
TRANSIENT_ERRORS: tuple[type[httpx.HTTPError], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
    httpx.RemoteProtocolError,
)


@dataclass(slots=True, frozen=True)
class RetryPolicy:
    """Transport-level retry settings handed to ``httpx-retries``."""

    attempts: int = 4
    backoff_factor: float = 0.5
    backoff_jitter: float = 1.0
    max_backoff_wait: float = 60.0
    respect_retry_after: bool = True
    # every admin API call is a POST
    methods: frozenset[str] = frozenset({"GET", "POST"})
    statuses: frozenset[int] = THROTTLED_STATUSES
    exceptions: tuple[type[httpx.HTTPError], ...] = TRANSIENT_ERRORS


@dataclass(slots=True, frozen=True)
class RateLimit:
    max_calls: int
    per_seconds: float


@dataclass(slots=True, frozen=True)
class CacheConfig:
    """Response cache for repeated read-only runs.

    Requests are keyed by their body as well as their URL, since every
    cmdlet goes to the same endpoint.
    """

    sqlite_path: str | None = None
    ttl_seconds: float | None = None
    refresh_ttl_on_access: bool = False


@dataclass(slots=True, frozen=True)
class ResilienceConfig:
    name: str
    timeout_seconds: float = 30.0
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    ratelimit: RateLimit | None = None
    cache: CacheConfig | None = None
    default_headers: Mapping[str, str] = field(default_factory=dict)
