"""On-prem snapshot export locations."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .env import optional_env_var

ROOMS_FILENAME = "Rooms.csv"
ROOM_LISTS_FILENAME = "RoomLists.csv"
MEMBERSHIP_FILENAME = "RoomListMembers.csv"


@dataclass(frozen=True, slots=True)
class SnapshotConfig:
    directory: Path
    rooms_filename: str = ROOMS_FILENAME
    room_lists_filename: str = ROOM_LISTS_FILENAME
    membership_filename: str = MEMBERSHIP_FILENAME

    @property
    def rooms_path(self) -> Path:
        return self.directory / self.rooms_filename

    @property
    def room_lists_path(self) -> Path:
        return self.directory / self.room_lists_filename

    @property
    def membership_path(self) -> Path:
        return self.directory / self.membership_filename


def get_snapshot_config(directory: Path | str | None = None) -> SnapshotConfig:
    """Resolve the snapshot directory from the argument, the environment or the cwd."""

    resolved = directory or optional_env_var("ROOMSYNC_SNAPSHOT_DIR") or "."
    return SnapshotConfig(directory=Path(resolved).expanduser())
