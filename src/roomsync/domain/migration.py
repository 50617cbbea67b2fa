"""Migration batch planning for rooms that have not reached the cloud yet.

The batch itself runs asynchronously in the cloud service. This module only
builds the request; submission is a fire-and-forget port call.
"""

from __future__ import annotations

import csv
import io
from dataclasses import dataclass
from typing import TYPE_CHECKING

from roomsync.domain.model import EntityStatus
from roomsync.domain.reconciliation import classify_room

if TYPE_CHECKING:
    from collections.abc import Iterable

    from roomsync.domain.model import Room
    from roomsync.domain.reconciliation import MatchResult

MIGRATION_CSV_HEADER = "EmailAddress"


@dataclass(frozen=True, slots=True, kw_only=True)
class MigrationBatchRequest:
    name: str
    rooms: tuple[Room, ...] = ()
    source_endpoint: str | None = None
    target_delivery_domain: str | None = None
    auto_start: bool = True

    @property
    def addresses(self) -> tuple[str, ...]:
        return tuple(room.primary_address.strip() for room in self.rooms)

    def to_csv(self) -> str:
        buffer = io.StringIO()
        writer = csv.writer(buffer, lineterminator="\r\n")
        writer.writerow([MIGRATION_CSV_HEADER])
        writer.writerows([address] for address in self.addresses)
        return buffer.getvalue()


@dataclass(frozen=True, slots=True)
class MigrationBatchReceipt:
    identity: str
    status: str = ""


def plan_migration_batch(
    room_matches: Iterable[MatchResult[Room]],
    *,
    name: str,
    source_endpoint: str | None = None,
    target_delivery_domain: str | None = None,
) -> MigrationBatchRequest:
    """Collect on-prem rooms classified ``NOT_MIGRATED`` into one batch."""

    rooms = tuple(
        match.on_prem
        for match in room_matches
        if match.on_prem is not None and classify_room(match) is EntityStatus.NOT_MIGRATED
    )
    return MigrationBatchRequest(
        name=name,
        rooms=rooms,
        source_endpoint=source_endpoint,
        target_delivery_domain=target_delivery_domain,
    )
