from __future__ import annotations

from .loading import LiveDirectorySource, SnapshotSource, SourceUnavailableError
from .provisioning import MigrationBatchSubmitter, ProvisioningError, RoomListProvisioner

__all__ = [
    "LiveDirectorySource",
    "MigrationBatchSubmitter",
    "ProvisioningError",
    "RoomListProvisioner",
    "SnapshotSource",
    "SourceUnavailableError",
]
