"""On-prem snapshot adapter (CSV exports)."""

from __future__ import annotations

from .reader import CsvSnapshotSource, SnapshotError, build_csv_snapshot_source, read_rows
from .schema import MembershipCsvRow, RoomCsvRow, RoomListCsvRow

__all__ = [
    "CsvSnapshotSource",
    "MembershipCsvRow",
    "RoomCsvRow",
    "RoomListCsvRow",
    "SnapshotError",
    "build_csv_snapshot_source",
    "read_rows",
]
