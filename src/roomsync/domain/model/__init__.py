"""Domain model for room directory reconciliation."""

from __future__ import annotations

from .directory import DirectoryEntry, Room, RoomList, RoomListMembership
from .enums import DiagnosticKind, EntityKind, EntityStatus, MatchMethod, Side

__all__ = [
    "DiagnosticKind",
    "DirectoryEntry",
    "EntityKind",
    "EntityStatus",
    "MatchMethod",
    "Room",
    "RoomList",
    "RoomListMembership",
    "Side",
]
