"""Orchestrator for the reconciliation core.

The engine composes the stage functions over two already-loaded
collections. It performs no I/O; everything it learns about data quality
travels in the returned diagnostics.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

from roomsync.domain.model import (
    DiagnosticKind,
    EntityKind,
    EntityStatus,
    Room,
    RoomList,
    Side,
)

from .aggregate import Summary, aggregate
from .classify import classify_room, classify_room_list
from .contracts import Diagnostic, MatchOutcome, MatchResult, MembershipDiff
from .match import match_room_lists, match_rooms
from .membership import MembershipIndex, diff_room_list_memberships, index_memberships

if TYPE_CHECKING:
    from roomsync.domain.collection import DirectoryCollections


log = getLogger(__name__)

type MatchRooms = Callable[[Iterable[Room], Iterable[Room]], MatchOutcome[Room]]
type MatchRoomLists = Callable[[Iterable[RoomList], Iterable[RoomList]], MatchOutcome[RoomList]]
type IndexMemberships = Callable[..., MembershipIndex]


@dataclass(frozen=True, slots=True, kw_only=True)
class ReconciliationResult:
    room_matches: tuple[MatchResult[Room], ...]
    room_list_matches: tuple[MatchResult[RoomList], ...]
    membership_diffs: tuple[MembershipDiff, ...]
    diagnostics: tuple[Diagnostic, ...]
    summary: Summary
    uncompared_lists: frozenset[str] = frozenset()

    def rooms_with_status(self, status: EntityStatus) -> tuple[MatchResult[Room], ...]:
        return tuple(match for match in self.room_matches if classify_room(match) is status)

    def room_lists_with_status(self, status: EntityStatus) -> tuple[MatchResult[RoomList], ...]:
        diffs = {
            diff.list_address: diff
            for diff in self.membership_diffs
            if diff.list_address not in self.uncompared_lists
        }
        return tuple(
            match
            for match in self.room_list_matches
            if classify_room_list(match, diffs.get(match.address)) is status
        )


@dataclass(slots=True)
class ReconciliationEngine:
    """Run matching, diffing, classification and aggregation for one run."""

    match_rooms: MatchRooms = field(default=match_rooms)
    match_room_lists: MatchRoomLists = field(default=match_room_lists)
    index_memberships: IndexMemberships = field(default=index_memberships)

    def reconcile(
        self,
        on_prem: DirectoryCollections,
        cloud: DirectoryCollections,
    ) -> ReconciliationResult:
        rooms = self.match_rooms(on_prem.rooms, cloud.rooms)
        room_lists = self.match_room_lists(on_prem.room_lists, cloud.room_lists)
        on_prem_members = self.index_memberships(on_prem.memberships, side=Side.ON_PREM)
        cloud_members = self.index_memberships(cloud.memberships, side=Side.CLOUD)
        diffs = diff_room_list_memberships(room_lists.results, on_prem_members, cloud_members)

        diagnostics = (
            *_unavailable_diagnostics(on_prem),
            *_unavailable_diagnostics(cloud),
            *rooms.diagnostics,
            *room_lists.diagnostics,
            *on_prem_members.diagnostics,
            *cloud_members.diagnostics,
        )
        member_names = {**cloud_members.member_names, **on_prem_members.member_names}
        uncompared = _uncompared_lists(diffs, on_prem, cloud)
        summary = aggregate(
            rooms.results,
            room_lists.results,
            diffs,
            diagnostics=diagnostics,
            member_names=member_names,
            uncompared_lists=uncompared,
        )
        log.info(
            "Reconciled rooms=%s (matched=%s), room_lists=%s (matched=%s), "
            "lists_with_differences=%s, warnings=%s, partial=%s",
            len(rooms.results),
            summary.rooms.matched,
            len(room_lists.results),
            summary.room_lists.matched,
            summary.lists_with_differences,
            len(diagnostics),
            summary.partial_data,
        )
        return ReconciliationResult(
            room_matches=rooms.results,
            room_list_matches=room_lists.results,
            membership_diffs=diffs,
            diagnostics=diagnostics,
            summary=summary,
            uncompared_lists=uncompared,
        )


def _unavailable_diagnostics(collections: DirectoryCollections) -> list[Diagnostic]:
    return [
        Diagnostic(
            kind=DiagnosticKind.SOURCE_UNAVAILABLE,
            entity_kind=entry.entity_kind,
            side=entry.side,
            identity=entry.list_address or "",
            detail=(
                f"{entry.side.label} {entry.entity_kind} data for {entry.list_address} "
                f"could not be loaded: {entry.detail}"
                if entry.list_address
                else f"{entry.side.label} {entry.entity_kind} data could not be loaded: "
                f"{entry.detail}"
            ),
        )
        for entry in collections.unavailable
    ]


def _uncompared_lists(
    diffs: Iterable[MembershipDiff],
    *collections: DirectoryCollections,
) -> frozenset[str]:
    """Lists whose membership could not be loaded on at least one side.

    A membership failure without a list address covers every list.
    """

    failed: set[str] = set()
    for entry in (e for c in collections for e in c.unavailable):
        if entry.entity_kind is not EntityKind.MEMBERSHIP:
            continue
        if entry.list_address is None:
            return frozenset(diff.list_address for diff in diffs)
        failed.add(entry.list_address)
    return frozenset(
        diff.list_address
        for diff in diffs
        if diff.list_address in failed or diff.cloud_address in failed
    )


def reconcile(on_prem: DirectoryCollections, cloud: DirectoryCollections) -> ReconciliationResult:
    """Reconcile with the default stage functions."""

    return ReconciliationEngine().reconcile(on_prem, cloud)


__all__ = [
    "ReconciliationEngine",
    "ReconciliationResult",
    "reconcile",
]
