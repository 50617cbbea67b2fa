"""Best-effort creation of room lists missing from the cloud directory.

Remediation consumes classified results but never feeds back into them: its
outcomes are reported on their own, one per list and one per member.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from roomsync.domain.model import EntityStatus, Side
from roomsync.domain.ports import ProvisioningError
from roomsync.domain.reconciliation import classify_room_list, index_memberships

if TYPE_CHECKING:
    from collections.abc import Iterable

    from roomsync.domain.model import RoomList, RoomListMembership
    from roomsync.domain.ports import RoomListProvisioner
    from roomsync.domain.reconciliation import MatchResult


log = getLogger(__name__)


class RemediationAbortedError(RuntimeError):
    """Raised when the cloud view is too incomplete to act on."""


class ActionOutcome(StrEnum):
    CREATED = "created"
    ADDED = "added"
    PLANNED = "planned"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True, slots=True, kw_only=True)
class MemberAction:
    member_address: str
    outcome: ActionOutcome
    detail: str = ""


@dataclass(frozen=True, slots=True, kw_only=True)
class RoomListAction:
    list_address: str
    display_name: str
    outcome: ActionOutcome
    members: tuple[MemberAction, ...] = ()
    detail: str = ""

    @property
    def failed_members(self) -> tuple[MemberAction, ...]:
        return tuple(m for m in self.members if m.outcome is ActionOutcome.FAILED)


@dataclass(frozen=True, slots=True)
class RemediationReport:
    actions: tuple[RoomListAction, ...] = ()
    dry_run: bool = False

    @property
    def list_outcomes(self) -> Counter[ActionOutcome]:
        return Counter(action.outcome for action in self.actions)

    @property
    def member_outcomes(self) -> Counter[ActionOutcome]:
        return Counter(member.outcome for action in self.actions for member in action.members)


def remediate_missing_room_lists(
    room_list_matches: Iterable[MatchResult[RoomList]],
    on_prem_memberships: Iterable[RoomListMembership],
    provisioner: RoomListProvisioner,
    *,
    dry_run: bool = False,
) -> RemediationReport:
    """Create every ``NOT_CREATED`` room list and replay its on-prem members.

    A failed list create skips that list's members; a failed member add is
    recorded and the next member is tried.
    """

    members_index = index_memberships(on_prem_memberships, side=Side.ON_PREM)
    actions: list[RoomListAction] = []
    for match in room_list_matches:
        if match.on_prem is None or classify_room_list(match) is not EntityStatus.NOT_CREATED:
            continue
        members = sorted(members_index.members_of(match.address))
        if dry_run:
            log.info("Would create room list %s with %s members", match.address, len(members))
            actions.append(
                RoomListAction(
                    list_address=match.address,
                    display_name=match.display_name,
                    outcome=ActionOutcome.PLANNED,
                    members=tuple(
                        MemberAction(member_address=member, outcome=ActionOutcome.PLANNED)
                        for member in members
                    ),
                )
            )
            continue
        actions.append(_create_with_members(match.on_prem, match.address, members, provisioner))

    report = RemediationReport(actions=tuple(actions), dry_run=dry_run)
    log.info(
        "Room list remediation finished: lists=%s, members=%s",
        dict(report.list_outcomes),
        dict(report.member_outcomes),
    )
    return report


def _create_with_members(
    room_list: RoomList,
    address: str,
    members: list[str],
    provisioner: RoomListProvisioner,
) -> RoomListAction:
    try:
        provisioner.create_room_list(room_list)
    except ProvisioningError as exc:
        log.warning("Could not create room list %s: %s", address, exc)
        return RoomListAction(
            list_address=address,
            display_name=room_list.display_name,
            outcome=ActionOutcome.FAILED,
            members=tuple(
                MemberAction(member_address=member, outcome=ActionOutcome.SKIPPED)
                for member in members
            ),
            detail=str(exc),
        )

    member_actions: list[MemberAction] = []
    for member in members:
        try:
            provisioner.add_room_list_member(room_list.primary_address, member)
        except ProvisioningError as exc:
            log.warning("Could not add %s to room list %s: %s", member, address, exc)
            member_actions.append(
                MemberAction(member_address=member, outcome=ActionOutcome.FAILED, detail=str(exc))
            )
            continue
        member_actions.append(MemberAction(member_address=member, outcome=ActionOutcome.ADDED))

    log.info("Created room list %s with %s members", address, len(member_actions))
    return RoomListAction(
        list_address=address,
        display_name=room_list.display_name,
        outcome=ActionOutcome.CREATED,
        members=tuple(member_actions),
    )
