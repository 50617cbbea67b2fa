from __future__ import annotations

from roomsync.domain.model import EntityStatus, Room, RoomList
from roomsync.domain.reconciliation import (
    MatchResult,
    classify_room,
    classify_room_list,
    diff_membership,
)
from tests.helpers.directory import make_room, make_room_list


def test_paired_room_is_migrated() -> None:
    room = make_room("A", "a@x.com")

    assert classify_room(MatchResult(on_prem=room, cloud=room)) is EntityStatus.MIGRATED_OR_SYNCED


def test_unpaired_rooms_are_not_migrated() -> None:
    room = make_room("A", "a@x.com")

    assert classify_room(MatchResult[Room](on_prem=room)) is EntityStatus.NOT_MIGRATED
    assert classify_room(MatchResult[Room](cloud=room)) is EntityStatus.NOT_MIGRATED


def test_list_without_cloud_match_is_not_created_despite_members() -> None:
    room_list = make_room_list("L2", "l2@x.com")
    diff = diff_membership("l2@x.com", {"s@x.com"}, set())

    status = classify_room_list(MatchResult[RoomList](on_prem=room_list), diff)

    assert status is EntityStatus.NOT_CREATED


def test_matched_list_with_equal_members_has_no_mismatch() -> None:
    room_list = make_room_list("L", "l@x.com")
    diff = diff_membership("l@x.com", {"a@x.com"}, {"a@x.com"})

    status = classify_room_list(MatchResult(on_prem=room_list, cloud=room_list), diff)

    assert status is EntityStatus.CREATED_NO_MISMATCH


def test_matched_list_with_different_members_has_mismatch() -> None:
    room_list = make_room_list("L", "l@x.com")
    diff = diff_membership("l@x.com", {"p@x.com", "q@x.com"}, {"q@x.com", "r@x.com"})

    status = classify_room_list(MatchResult(on_prem=room_list, cloud=room_list), diff)

    assert status is EntityStatus.CREATED_WITH_MISMATCH


def test_missing_diff_counts_as_no_differences() -> None:
    room_list = make_room_list("L", "l@x.com")

    status = classify_room_list(MatchResult(on_prem=room_list, cloud=room_list))

    assert status is EntityStatus.CREATED_NO_MISMATCH


def test_cloud_only_list_is_judged_by_its_diff() -> None:
    room_list = make_room_list("Cloud", "c@x.com")
    diff = diff_membership("c@x.com", set(), {"z@x.com"})

    status = classify_room_list(MatchResult[RoomList](cloud=room_list), diff)

    assert status is EntityStatus.CREATED_WITH_MISMATCH


def test_status_labels_are_human_readable() -> None:
    assert EntityStatus.NOT_CREATED.label == "Not created"
    assert all(status.label for status in EntityStatus)
