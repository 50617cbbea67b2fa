"""Where reports, logs and the HTTP cache are written."""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Final

APP_DIR_NAME: Final[str] = "roomsync"
HTTP_CACHE_FILENAME: Final[str] = "http_cache.db"
REPORTS_DIRNAME: Final[str] = "reports"

REPORT_PREFIX: Final[str] = "RoomComparison"
REMEDIATION_LOG_PREFIX: Final[str] = "RoomListCreation"
MIGRATION_BATCH_PREFIX: Final[str] = "MigrationBatch"
TIMESTAMP_FORMAT: Final[str] = "%Y%m%d-%H%M%S"


@dataclass(frozen=True, slots=True)
class StorageConfig:
    data_dir: Path

    def root(self, *, ensure: bool = False) -> Path:
        path = self.data_dir.expanduser().resolve()
        if ensure:
            path.mkdir(parents=True, exist_ok=True)
        return path

    def http_cache_path(self) -> Path:
        return self.root(ensure=True) / HTTP_CACHE_FILENAME

    def reports_dir(self) -> Path:
        path = self.root() / REPORTS_DIRNAME
        path.mkdir(parents=True, exist_ok=True)
        return path


def timestamped_name(prefix: str, suffix: str, *, moment: datetime | None = None) -> str:
    """Return ``<prefix>_<YYYYmmdd-HHMMSS><suffix>``."""

    stamp = (moment or datetime.now()).strftime(TIMESTAMP_FORMAT)  # noqa: DTZ005
    return f"{prefix}_{stamp}{suffix}"


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    """Use ``ROOMSYNC_DATA_DIR`` when set, else the per-user data directory."""

    override = os.getenv("ROOMSYNC_DATA_DIR")
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())
