"""Read the on-prem directory snapshot from CSV exports."""

from __future__ import annotations

import csv
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from pydantic import ValidationError

from roomsync.config.snapshot import get_snapshot_config
from roomsync.domain.model import Room, RoomList, RoomListMembership
from roomsync.domain.ports import SourceUnavailableError

from .schema import MembershipCsvRow, RoomCsvRow, RoomListCsvRow

if TYPE_CHECKING:
    from collections.abc import Iterator
    from pathlib import Path

    from roomsync.config.snapshot import SnapshotConfig
    from roomsync.domain.ports import SnapshotSource

    from .schema import SnapshotRow

log = getLogger(__name__)


class SnapshotError(SourceUnavailableError):
    """Raised when a snapshot export is missing or unreadable."""


def _sniff_delimiter(sample: str) -> str:
    """Detect a CSV delimiter, defaulting to comma when uncertain."""

    try:
        dialect = csv.Sniffer().sniff(sample, delimiters=",;")
        return dialect.delimiter
    except csv.Error:
        return ";" if sample.count(";") > sample.count(",") else ","


def read_rows[R: SnapshotRow](path: Path, model: type[R]) -> Iterator[R]:
    """Yield validated rows of ``path``; rows that fail validation are skipped."""

    if not path.exists():
        raise SnapshotError(f"Snapshot file not found: {path}")

    try:
        with path.open(newline="", encoding="utf-8-sig") as handle:
            sample = handle.read(4096)
            handle.seek(0)
            reader = csv.DictReader(handle, delimiter=_sniff_delimiter(sample))

            headers = {name.strip() for name in reader.fieldnames or () if name}
            missing = [
                "/".join(choices)
                for choices in model.required_columns
                if not headers.intersection(choices)
            ]
            if missing:
                raise SnapshotError(f"Missing expected columns in {path}: {', '.join(missing)}")

            for line_number, raw in enumerate(reader, start=2):
                row = {key.strip(): value for key, value in raw.items() if key}
                try:
                    yield model.model_validate(row)
                except ValidationError as exc:
                    log.warning(f"Skipping malformed row {line_number} in {path.name}: {exc}")
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise SnapshotError(f"Could not read {path}: {exc}") from exc


@dataclass(slots=True)
class CsvSnapshotSource:
    """Snapshot source backed by three CSV exports in one directory."""

    config: SnapshotConfig = field(default_factory=get_snapshot_config)

    def load_rooms(self) -> list[Room]:
        return [
            Room(
                display_name=row.display_name,
                primary_address=row.primary_address,
                attributes=row.extra_attributes(),
            )
            for row in read_rows(self.config.rooms_path, RoomCsvRow)
        ]

    def load_room_lists(self) -> list[RoomList]:
        return [
            RoomList(
                display_name=row.display_name,
                primary_address=row.primary_address,
                attributes=row.extra_attributes(),
            )
            for row in read_rows(self.config.room_lists_path, RoomListCsvRow)
        ]

    def load_membership(self) -> list[RoomListMembership]:
        return [
            RoomListMembership(
                list_address=row.list_address,
                member_address=row.member_address,
                member_display_name=row.member_display_name,
                member_kind=row.member_kind,
            )
            for row in read_rows(self.config.membership_path, MembershipCsvRow)
        ]


def build_csv_snapshot_source(config: SnapshotConfig | None = None) -> CsvSnapshotSource:
    return CsvSnapshotSource(config=config or get_snapshot_config())


if TYPE_CHECKING:
    _source_check: SnapshotSource = CsvSnapshotSource()
