"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, optional_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .exchange import ExchangeConfig, default_exchange_resilience, get_exchange_config
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy
from .logging import configure_logging
from .snapshot import SnapshotConfig, get_snapshot_config
from .storage import StorageConfig, get_storage_config, timestamped_name

__all__ = [
    "CacheConfig",
    "ConfigurationError",
    "ExchangeConfig",
    "MissingConfigurationError",
    "RateLimit",
    "ResilienceConfig",
    "RetryPolicy",
    "SnapshotConfig",
    "StorageConfig",
    "configure_logging",
    "default_exchange_resilience",
    "env_flag",
    "get_exchange_config",
    "get_snapshot_config",
    "get_storage_config",
    "optional_env_var",
    "require_env_vars",
    "timestamped_name",
]
