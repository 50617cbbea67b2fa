"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class Side(StrEnum):
    ON_PREM = "on_prem"
    CLOUD = "cloud"

    @property
    def label(self) -> str:
        return "On-prem" if self is Side.ON_PREM else "Cloud"


class EntityKind(StrEnum):
    ROOM = "room"
    ROOM_LIST = "room_list"
    MEMBERSHIP = "membership"


class EntityStatus(StrEnum):
    """Migration state derived per room or room list."""

    MIGRATED_OR_SYNCED = "migrated_or_synced"
    NOT_MIGRATED = "not_migrated"
    CREATED_NO_MISMATCH = "created_no_mismatch"
    CREATED_WITH_MISMATCH = "created_with_mismatch"
    NOT_CREATED = "not_created"

    @property
    def label(self) -> str:
        return _STATUS_LABELS[self]


_STATUS_LABELS: dict[EntityStatus, str] = {
    EntityStatus.MIGRATED_OR_SYNCED: "Migrated or synced",
    EntityStatus.NOT_MIGRATED: "Not migrated",
    EntityStatus.CREATED_NO_MISMATCH: "Created, members match",
    EntityStatus.CREATED_WITH_MISMATCH: "Created, members differ",
    EntityStatus.NOT_CREATED: "Not created",
}


class MatchMethod(StrEnum):
    """How an on-prem record was paired with its cloud counterpart."""

    ADDRESS = "address"
    DISPLAY_NAME = "display_name"


class DiagnosticKind(StrEnum):
    MISSING_IDENTITY = "missing_identity"
    DUPLICATE_IDENTITY = "duplicate_identity"
    SOURCE_UNAVAILABLE = "source_unavailable"
    LOOKUP_FALLBACK_USED = "lookup_fallback_used"
    AMBIGUOUS_FALLBACK = "ambiguous_fallback"
