"""Migration-state classification.

Precedence for room lists is strict: a list without a cloud counterpart is
``NOT_CREATED`` whatever its on-prem membership looks like.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from roomsync.domain.model import EntityStatus

if TYPE_CHECKING:
    from roomsync.domain.model import Room, RoomList

    from .contracts import MatchResult, MembershipDiff


def classify_room(match: MatchResult[Room]) -> EntityStatus:
    if match.matched:
        return EntityStatus.MIGRATED_OR_SYNCED
    return EntityStatus.NOT_MIGRATED


def classify_room_list(
    match: MatchResult[RoomList],
    diff: MembershipDiff | None = None,
) -> EntityStatus:
    """Classify a room list from its match and membership diff.

    Cloud-only lists exist in the cloud, so they are judged by their diff
    like paired lists. A missing diff counts as no differences.
    """

    if match.cloud is None:
        return EntityStatus.NOT_CREATED
    if diff is None or not diff.has_differences:
        return EntityStatus.CREATED_NO_MISMATCH
    return EntityStatus.CREATED_WITH_MISMATCH
