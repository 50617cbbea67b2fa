from __future__ import annotations

from typing import TYPE_CHECKING

from roomsync.domain.reconciliation import match_room_lists
from roomsync.domain.remediation import ActionOutcome, remediate_missing_room_lists
from tests.helpers.directory import FakeProvisioner, make_members, make_room_list

if TYPE_CHECKING:
    from roomsync.domain.model import RoomList
    from roomsync.domain.reconciliation import MatchResult


def _matches() -> tuple[MatchResult[RoomList], ...]:
    return match_room_lists(
        [
            make_room_list("Existing", "existing@x.com"),
            make_room_list("Missing", "Missing@x.com"),
        ],
        [make_room_list("Existing", "existing@x.com")],
    ).results


_MEMBERS = [
    *make_members("missing@x.com", "b@x.com", "a@x.com"),
    *make_members("existing@x.com", "c@x.com"),
]


def test_creates_only_missing_lists_and_replays_members() -> None:
    provisioner = FakeProvisioner()

    report = remediate_missing_room_lists(_matches(), _MEMBERS, provisioner)

    assert provisioner.created == ["Missing@x.com"]
    assert provisioner.added == [("Missing@x.com", "a@x.com"), ("Missing@x.com", "b@x.com")]
    (action,) = report.actions
    assert action.list_address == "missing@x.com"
    assert action.outcome is ActionOutcome.CREATED
    assert [m.outcome for m in action.members] == [ActionOutcome.ADDED, ActionOutcome.ADDED]
    assert report.member_outcomes == {ActionOutcome.ADDED: 2}
    assert not report.dry_run


def test_dry_run_plans_without_calling_provisioner() -> None:
    provisioner = FakeProvisioner()

    report = remediate_missing_room_lists(_matches(), _MEMBERS, provisioner, dry_run=True)

    assert provisioner.created == []
    assert provisioner.added == []
    assert report.dry_run
    assert report.list_outcomes == {ActionOutcome.PLANNED: 1}
    assert [m.member_address for m in report.actions[0].members] == ["a@x.com", "b@x.com"]


def test_failed_create_skips_members() -> None:
    provisioner = FakeProvisioner(failing_lists=frozenset({"Missing@x.com"}))

    report = remediate_missing_room_lists(_matches(), _MEMBERS, provisioner)

    (action,) = report.actions
    assert action.outcome is ActionOutcome.FAILED
    assert "cannot create" in action.detail
    assert report.member_outcomes == {ActionOutcome.SKIPPED: 2}
    assert provisioner.added == []


def test_failed_member_add_continues_with_next_member() -> None:
    provisioner = FakeProvisioner(failing_members=frozenset({"a@x.com"}))

    report = remediate_missing_room_lists(_matches(), _MEMBERS, provisioner)

    (action,) = report.actions
    assert action.outcome is ActionOutcome.CREATED
    assert [m.member_address for m in action.failed_members] == ["a@x.com"]
    assert provisioner.added == [("Missing@x.com", "b@x.com")]


def test_cloud_only_lists_are_left_alone() -> None:
    matches = match_room_lists([], [make_room_list("Cloud", "cloud@x.com")]).results

    report = remediate_missing_room_lists(matches, [], FakeProvisioner())

    assert report.actions == ()
