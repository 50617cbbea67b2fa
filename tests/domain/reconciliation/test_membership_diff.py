from __future__ import annotations

import pytest

from roomsync.domain.model import DiagnosticKind, EntityKind, RoomListMembership, Side
from roomsync.domain.reconciliation import (
    diff_membership,
    diff_room_list_memberships,
    index_memberships,
    match_room_lists,
)
from tests.helpers.directory import make_members, make_room_list


def test_scenario_members_differ_on_both_sides() -> None:
    diff = diff_membership("l@x.com", {"p@x.com", "q@x.com"}, {"q@x.com", "r@x.com"})

    assert diff.only_on_prem == {"p@x.com"}
    assert diff.only_cloud == {"r@x.com"}
    assert diff.shared == {"q@x.com"}
    assert diff.has_differences


@pytest.mark.parametrize(
    ("on_prem", "cloud"),
    [
        (set(), set()),
        ({"a"}, set()),
        (set(), {"a"}),
        ({"a", "b", "c"}, {"b", "c", "d"}),
        ({"a", "b"}, {"a", "b"}),
    ],
)
def test_diff_set_algebra(on_prem: set[str], cloud: set[str]) -> None:
    diff = diff_membership("l", on_prem, cloud)
    both = on_prem & cloud

    assert not diff.only_on_prem & diff.only_cloud
    assert diff.only_on_prem | both == on_prem
    assert diff.only_cloud | both == cloud
    assert diff.on_prem_members == on_prem
    assert diff.cloud_members == cloud


def test_index_collapses_duplicate_edges() -> None:
    edges = [
        *make_members("L@x.com", "a@x.com", "b@x.com"),
        *make_members(" l@X.com", "A@x.com"),
    ]

    index = index_memberships(edges, side=Side.ON_PREM)

    assert dict(index.members) == {"l@x.com": frozenset({"a@x.com", "b@x.com"})}
    assert index.edge_count == 2
    assert index.diagnostics == ()
    assert index.member_names["a@x.com"] == "A"


def test_index_skips_edges_without_identity() -> None:
    edges = [
        RoomListMembership(list_address="", member_address="a@x.com"),
        RoomListMembership(list_address="l@x.com", member_address=" ", member_display_name="Ghost"),
        RoomListMembership(list_address="l@x.com", member_address="b@x.com"),
    ]

    index = index_memberships(edges, side=Side.CLOUD)

    assert dict(index.members) == {"l@x.com": frozenset({"b@x.com"})}
    assert [d.kind for d in index.diagnostics] == [DiagnosticKind.MISSING_IDENTITY] * 2
    assert all(d.entity_kind is EntityKind.MEMBERSHIP for d in index.diagnostics)
    assert all(d.side is Side.CLOUD for d in index.diagnostics)


def test_every_list_yields_a_diff_even_without_members() -> None:
    matches = match_room_lists(
        [make_room_list("Empty", "empty@x.com"), make_room_list("Busy", "busy@x.com")],
        [make_room_list("Empty", "empty@x.com"), make_room_list("Cloud only", "c@x.com")],
    ).results
    on_prem = index_memberships(make_members("busy@x.com", "r1@x.com"), side=Side.ON_PREM)
    cloud = index_memberships([], side=Side.CLOUD)

    diffs = diff_room_list_memberships(matches, on_prem, cloud)

    assert [d.list_address for d in diffs] == ["empty@x.com", "busy@x.com", "c@x.com"]
    empty = diffs[0]
    assert empty.only_on_prem == frozenset()
    assert empty.only_cloud == frozenset()
    assert not empty.has_differences
    assert diffs[1].only_on_prem == {"r1@x.com"}


def test_fallback_match_reads_cloud_members_from_cloud_address() -> None:
    matches = match_room_lists(
        [make_room_list("Building 1", "b1@corp.local")],
        [make_room_list("Building 1", "b1@corp.cloud")],
    ).results
    on_prem = index_memberships(
        make_members("b1@corp.local", "r1@x.com", "r2@x.com"), side=Side.ON_PREM
    )
    cloud = index_memberships(make_members("b1@corp.cloud", "r2@x.com"), side=Side.CLOUD)

    (diff,) = diff_room_list_memberships(matches, on_prem, cloud)

    assert diff.list_address == "b1@corp.local"
    assert diff.cloud_address == "b1@corp.cloud"
    assert diff.only_on_prem == {"r1@x.com"}
    assert diff.only_cloud == frozenset()
    assert diff.shared == {"r2@x.com"}


def test_lists_known_only_from_membership_data_are_diffed() -> None:
    on_prem = index_memberships(make_members("ghost@x.com", "r1@x.com"), side=Side.ON_PREM)
    cloud = index_memberships(
        [*make_members("ghost@x.com", "r2@x.com"), *make_members("phantom@x.com", "r3@x.com")],
        side=Side.CLOUD,
    )

    diffs = diff_room_list_memberships((), on_prem, cloud)

    assert [d.list_address for d in diffs] == ["ghost@x.com", "phantom@x.com"]
    ghost, phantom = diffs
    assert ghost.only_on_prem == {"r1@x.com"}
    assert ghost.only_cloud == {"r2@x.com"}
    assert phantom.only_cloud == {"r3@x.com"}
    assert phantom.cloud_address == "phantom@x.com"


def test_cloud_only_list_reads_on_prem_members_under_its_address() -> None:
    # the on-prem list record is missing but its membership rows were exported
    matches = match_room_lists([], [make_room_list("L", "l@x.com")]).results
    on_prem = index_memberships(
        make_members("l@x.com", "p@x.com", "q@x.com"), side=Side.ON_PREM
    )
    cloud = index_memberships(make_members("L@x.com", "q@x.com"), side=Side.CLOUD)

    (diff,) = diff_room_list_memberships(matches, on_prem, cloud)

    assert diff.list_address == "l@x.com"
    assert diff.only_on_prem == {"p@x.com"}
    assert diff.only_cloud == frozenset()
    assert diff.shared == {"q@x.com"}
