"""Reconciliation core for comparing on-prem and cloud room directories.

Layered flow:
1) normalize addresses into identity keys
2) match rooms and room lists across sides
3) diff room-list membership per list identity
4) classify migration state per entity
5) aggregate counts, detail rows and warnings into a summary
"""

from __future__ import annotations

from .aggregate import (
    EntityCounts,
    MemberMismatchRow,
    RoomListRow,
    RoomRow,
    Summary,
    aggregate,
)
from .classify import classify_room, classify_room_list
from .contracts import Diagnostic, MatchOutcome, MatchResult, MembershipDiff
from .engine import ReconciliationEngine, ReconciliationResult, reconcile
from .match import index_by_address, match_room_lists, match_rooms
from .membership import (
    MembershipIndex,
    diff_membership,
    diff_room_list_memberships,
    index_memberships,
)
from .normalize import normalize_address

__all__ = [
    "Diagnostic",
    "EntityCounts",
    "MatchOutcome",
    "MatchResult",
    "MemberMismatchRow",
    "MembershipDiff",
    "MembershipIndex",
    "ReconciliationEngine",
    "ReconciliationResult",
    "RoomListRow",
    "RoomRow",
    "Summary",
    "aggregate",
    "classify_room",
    "classify_room_list",
    "diff_membership",
    "diff_room_list_memberships",
    "index_by_address",
    "index_memberships",
    "match_room_lists",
    "match_rooms",
    "normalize_address",
    "reconcile",
]
