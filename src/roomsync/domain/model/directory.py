"""Directory records as loaded from either side of a migration.

Records are immutable once loaded. Matching and diffing derive new values
instead of merging records in place.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import ClassVar

from .enums import EntityKind


@dataclass(frozen=True, slots=True, kw_only=True)
class DirectoryEntry:
    """Shared shape of addressable directory objects (rooms and room lists)."""

    kind: ClassVar[EntityKind]

    display_name: str
    primary_address: str
    # Source-specific columns (office, capacity, alias, ...) kept for display.
    attributes: Mapping[str, str] = field(default_factory=dict, hash=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class Room(DirectoryEntry):
    kind: ClassVar[EntityKind] = EntityKind.ROOM


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomList(DirectoryEntry):
    kind: ClassVar[EntityKind] = EntityKind.ROOM_LIST


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomListMembership:
    """Edge between a room list and one of its members."""

    list_address: str
    member_address: str
    member_display_name: str = ""
    member_kind: str = ""
