"""Load both sides of the directory into in-memory collections.

A failed load never aborts the run. The collection is replaced by an empty
one and recorded as unavailable, so the summary can report partial data
instead of a wall of false mismatches.
"""

from __future__ import annotations

from dataclasses import dataclass
from logging import getLogger
from typing import TYPE_CHECKING

from roomsync.domain.model import EntityKind, Side
from roomsync.domain.ports import SourceUnavailableError
from roomsync.domain.reconciliation.normalize import normalize_address

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from roomsync.domain.model import Room, RoomList, RoomListMembership
    from roomsync.domain.ports import LiveDirectorySource, SnapshotSource


log = getLogger(__name__)


@dataclass(frozen=True, slots=True, kw_only=True)
class UnavailableCollection:
    side: Side
    entity_kind: EntityKind
    detail: str
    list_address: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryCollections:
    """Everything loaded from one side for a single run."""

    side: Side
    rooms: tuple[Room, ...] = ()
    room_lists: tuple[RoomList, ...] = ()
    memberships: tuple[RoomListMembership, ...] = ()
    unavailable: tuple[UnavailableCollection, ...] = ()

    @property
    def degraded(self) -> bool:
        return bool(self.unavailable)


def collect_snapshot(source: SnapshotSource) -> DirectoryCollections:
    """Load the on-prem snapshot, degrading per collection on failure."""

    unavailable: list[UnavailableCollection] = []
    side = Side.ON_PREM
    rooms = _load(source.load_rooms, side, EntityKind.ROOM, unavailable)
    room_lists = _load(source.load_room_lists, side, EntityKind.ROOM_LIST, unavailable)
    memberships = _load(source.load_membership, side, EntityKind.MEMBERSHIP, unavailable)
    return DirectoryCollections(
        side=side,
        rooms=rooms,
        room_lists=room_lists,
        memberships=memberships,
        unavailable=tuple(unavailable),
    )


def collect_live(source: LiveDirectorySource) -> DirectoryCollections:
    """Query the cloud directory, fetching membership once per room list."""

    unavailable: list[UnavailableCollection] = []
    side = Side.CLOUD
    rooms = _load(source.load_rooms, side, EntityKind.ROOM, unavailable)
    room_lists = _load(source.load_room_lists, side, EntityKind.ROOM_LIST, unavailable)

    memberships: list[RoomListMembership] = []
    fetched: set[str] = set()
    for room_list in room_lists:
        key = normalize_address(room_list.primary_address)
        if not key or key in fetched:
            continue
        fetched.add(key)
        try:
            memberships.extend(source.load_membership(room_list.primary_address))
        except SourceUnavailableError as exc:
            log.warning("Membership of %s unavailable: %s", key, exc)
            unavailable.append(
                UnavailableCollection(
                    side=side,
                    entity_kind=EntityKind.MEMBERSHIP,
                    detail=str(exc),
                    list_address=key,
                )
            )

    log.info(
        "Loaded cloud directory: rooms=%s, room_lists=%s, memberships=%s, unavailable=%s",
        len(rooms),
        len(room_lists),
        len(memberships),
        len(unavailable),
    )
    return DirectoryCollections(
        side=side,
        rooms=rooms,
        room_lists=room_lists,
        memberships=tuple(memberships),
        unavailable=tuple(unavailable),
    )


def _load[T](
    loader: Callable[[], Sequence[T]],
    side: Side,
    entity_kind: EntityKind,
    unavailable: list[UnavailableCollection],
) -> tuple[T, ...]:
    try:
        records = tuple(loader())
    except SourceUnavailableError as exc:
        log.warning("%s %s collection unavailable: %s", side.label, entity_kind, exc)
        unavailable.append(
            UnavailableCollection(side=side, entity_kind=entity_kind, detail=str(exc))
        )
        return ()
    log.debug("Loaded %s %s records from %s", len(records), entity_kind, side)
    return records
