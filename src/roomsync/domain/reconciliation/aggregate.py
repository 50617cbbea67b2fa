"""Fold match, diff and classification output into a report summary.

Aggregation is pure: it only reads already-computed inputs and returns a new
``Summary``. Rendering is left to the presentation layer.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from roomsync.domain.model import DiagnosticKind, EntityStatus, Side

from .classify import classify_room, classify_room_list
from .normalize import normalize_address

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from collections.abc import Set as AbstractSet

    from roomsync.domain.model import DirectoryEntry, MatchMethod, Room, RoomList

    from .contracts import Diagnostic, MatchResult, MembershipDiff


@dataclass(frozen=True, slots=True, kw_only=True)
class EntityCounts:
    on_prem_total: int = 0
    cloud_total: int = 0
    matched: int = 0
    only_on_prem: int = 0
    only_cloud: int = 0

    @property
    def unmatched(self) -> int:
        return self.only_on_prem + self.only_cloud


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomRow:
    display_name: str
    address: str
    status: EntityStatus
    on_prem_address: str | None = None
    cloud_address: str | None = None
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomListRow:
    display_name: str
    address: str
    status: EntityStatus
    matched_by: MatchMethod | None = None
    on_prem_address: str | None = None
    cloud_address: str | None = None
    on_prem_members: int = 0
    cloud_members: int = 0
    only_on_prem: int = 0
    only_cloud: int = 0
    members_compared: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberMismatchRow:
    """A member present on one side of a room list only."""

    list_display_name: str
    list_address: str
    member_address: str
    member_display_name: str
    present_on: Side


@dataclass(frozen=True, slots=True, kw_only=True)
class Summary:
    rooms: EntityCounts
    room_lists: EntityCounts
    room_statuses: Mapping[EntityStatus, int]
    room_list_statuses: Mapping[EntityStatus, int]
    lists_total: int
    lists_with_differences: int
    members_only_on_prem: int
    members_only_cloud: int
    room_rows: tuple[RoomRow, ...] = ()
    room_list_rows: tuple[RoomListRow, ...] = ()
    member_mismatch_rows: tuple[MemberMismatchRow, ...] = ()
    warnings: tuple[Diagnostic, ...] = ()
    partial_data: bool = False


def aggregate(
    room_matches: Sequence[MatchResult[Room]],
    room_list_matches: Sequence[MatchResult[RoomList]],
    membership_diffs: Iterable[MembershipDiff],
    *,
    diagnostics: Iterable[Diagnostic] = (),
    member_names: Mapping[str, str] | None = None,
    uncompared_lists: AbstractSet[str] = frozenset(),
) -> Summary:
    """Build the summary for one reconciliation run.

    A diff counts as a mismatch unless its list is ``NOT_CREATED``. Diffs for
    lists that only appear in membership data count when the cloud side has
    members for them. Lists in ``uncompared_lists`` had their membership fail
    to load; they are classified by existence alone and never count as
    mismatches.
    """

    names = member_names or {}
    warnings = tuple(diagnostics)
    diffs_by_address = {diff.list_address: diff for diff in membership_diffs}

    room_rows = [_room_row(match) for match in room_matches]
    list_statuses: dict[str, EntityStatus] = {}
    list_rows: list[RoomListRow] = []
    for match in room_list_matches:
        diff = diffs_by_address.get(match.address)
        compared = match.address not in uncompared_lists
        status = classify_room_list(match, diff if compared else None)
        list_statuses[match.address] = status
        list_rows.append(_room_list_row(match, diff, status, members_loaded=compared))

    reportable = [
        diff
        for diff in diffs_by_address.values()
        if diff.has_differences
        and diff.list_address not in uncompared_lists
        and _is_reportable(diff, list_statuses.get(diff.list_address))
    ]
    mismatch_rows = [row for diff in reportable for row in _member_rows(diff, names)]

    return Summary(
        rooms=_count(room_matches),
        room_lists=_count(room_list_matches),
        room_statuses=dict(Counter(row.status for row in room_rows)),
        room_list_statuses=dict(Counter(row.status for row in list_rows)),
        lists_total=len(diffs_by_address),
        lists_with_differences=len(reportable),
        members_only_on_prem=sum(len(diff.only_on_prem) for diff in reportable),
        members_only_cloud=sum(len(diff.only_cloud) for diff in reportable),
        room_rows=tuple(
            sorted(room_rows, key=lambda row: _sort_key(row.display_name, row.address))
        ),
        room_list_rows=tuple(
            sorted(list_rows, key=lambda row: _sort_key(row.display_name, row.address))
        ),
        member_mismatch_rows=tuple(
            sorted(
                mismatch_rows,
                key=lambda row: (
                    *_sort_key(row.list_display_name, row.list_address),
                    *_sort_key(row.member_display_name, row.member_address),
                ),
            )
        ),
        warnings=warnings,
        partial_data=any(w.kind is DiagnosticKind.SOURCE_UNAVAILABLE for w in warnings),
    )


def _sort_key(display_name: str, address: str) -> tuple[str, str]:
    return display_name.casefold(), normalize_address(address)


def _count[T: DirectoryEntry](matches: Sequence[MatchResult[T]]) -> EntityCounts:
    matched = sum(1 for match in matches if match.matched)
    only_on_prem = sum(1 for match in matches if match.cloud is None)
    only_cloud = sum(1 for match in matches if match.on_prem is None)
    return EntityCounts(
        on_prem_total=matched + only_on_prem,
        cloud_total=matched + only_cloud,
        matched=matched,
        only_on_prem=only_on_prem,
        only_cloud=only_cloud,
    )


def _is_reportable(diff: MembershipDiff, status: EntityStatus | None) -> bool:
    if status is None:
        return bool(diff.cloud_members)
    return status is not EntityStatus.NOT_CREATED


def _address_of(record: DirectoryEntry | None) -> str | None:
    return normalize_address(record.primary_address) if record is not None else None


def _room_row(match: MatchResult[Room]) -> RoomRow:
    attributes = dict(match.cloud.attributes) if match.cloud is not None else {}
    if match.on_prem is not None:
        attributes.update(match.on_prem.attributes)
    return RoomRow(
        display_name=match.display_name,
        address=match.address,
        status=classify_room(match),
        on_prem_address=_address_of(match.on_prem),
        cloud_address=match.cloud_address,
        attributes=attributes,
    )


def _room_list_row(
    match: MatchResult[RoomList],
    diff: MembershipDiff | None,
    status: EntityStatus,
    *,
    members_loaded: bool = True,
) -> RoomListRow:
    # a list that was never created has no membership to compare against
    compared = members_loaded and status is not EntityStatus.NOT_CREATED
    return RoomListRow(
        display_name=match.display_name,
        address=match.address,
        status=status,
        matched_by=match.matched_by,
        on_prem_address=_address_of(match.on_prem),
        cloud_address=match.cloud_address,
        on_prem_members=len(diff.on_prem_members) if diff is not None else 0,
        cloud_members=len(diff.cloud_members) if diff is not None and compared else 0,
        only_on_prem=len(diff.only_on_prem) if diff is not None and compared else 0,
        only_cloud=len(diff.only_cloud) if diff is not None and compared else 0,
        members_compared=members_loaded,
    )


def _member_rows(diff: MembershipDiff, names: Mapping[str, str]) -> list[MemberMismatchRow]:
    list_name = diff.list_display_name or diff.list_address
    return [
        MemberMismatchRow(
            list_display_name=list_name,
            list_address=diff.list_address,
            member_address=address,
            member_display_name=names.get(address, ""),
            present_on=side,
        )
        for side, addresses in ((Side.ON_PREM, diff.only_on_prem), (Side.CLOUD, diff.only_cloud))
        for address in addresses
    ]
