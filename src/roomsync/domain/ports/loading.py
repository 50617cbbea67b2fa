"""Ports for loading directory records from either side of a migration."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from roomsync.domain.model import Room, RoomList, RoomListMembership


class SourceUnavailableError(RuntimeError):
    """Raised by loaders when a collection cannot be produced."""


@runtime_checkable
class SnapshotSource(Protocol):
    """Point-in-time export of the on-prem directory."""

    def load_rooms(self) -> Sequence[Room]: ...

    def load_room_lists(self) -> Sequence[RoomList]: ...

    def load_membership(self) -> Sequence[RoomListMembership]: ...


@runtime_checkable
class LiveDirectorySource(Protocol):
    """Live query against the cloud directory.

    Membership is fetched per list, one call per list identity.
    """

    def load_rooms(self) -> Sequence[Room]: ...

    def load_room_lists(self) -> Sequence[RoomList]: ...

    def load_membership(self, list_identity: str) -> Sequence[RoomListMembership]: ...


__all__ = ["LiveDirectorySource", "SnapshotSource", "SourceUnavailableError"]
