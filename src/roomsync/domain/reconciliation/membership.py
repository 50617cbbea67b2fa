"""Membership diff stage.

Responsibilities of this stage:
- group membership edges into per-list sets of normalized member addresses
- compute the symmetric difference per list with set algebra
- emit one diff for every list identity seen in list or membership data
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

from roomsync.domain.model import DiagnosticKind, EntityKind

from .contracts import Diagnostic, MembershipDiff
from .normalize import normalize_address

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence
    from collections.abc import Set as AbstractSet

    from roomsync.domain.model import RoomList, RoomListMembership, Side

    from .contracts import MatchResult


log = logging.getLogger(__name__)

_EMPTY: frozenset[str] = frozenset()


@dataclass(frozen=True, slots=True)
class MembershipIndex:
    """Member sets keyed by normalized list address, for one side."""

    members: Mapping[str, frozenset[str]] = field(default_factory=dict)
    member_names: Mapping[str, str] = field(default_factory=dict)
    diagnostics: tuple[Diagnostic, ...] = ()

    def members_of(self, list_address: str | None) -> frozenset[str]:
        if not list_address:
            return _EMPTY
        return self.members.get(list_address, _EMPTY)

    @property
    def edge_count(self) -> int:
        return sum(len(members) for members in self.members.values())


def index_memberships(
    memberships: Iterable[RoomListMembership],
    *,
    side: Side,
) -> MembershipIndex:
    """Collapse membership edges into per-list sets.

    Duplicate edges collapse silently; edges missing either address are
    skipped and reported.
    """

    grouped: dict[str, set[str]] = {}
    names: dict[str, str] = {}
    diagnostics: list[Diagnostic] = []
    for edge in memberships:
        list_key = normalize_address(edge.list_address)
        member_key = normalize_address(edge.member_address)
        if not list_key or not member_key:
            missing = "list" if not list_key else "member"
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MISSING_IDENTITY,
                    entity_kind=EntityKind.MEMBERSHIP,
                    side=side,
                    identity=list_key or member_key,
                    detail=(
                        f"membership of '{edge.member_display_name or member_key}' in "
                        f"'{list_key or '?'}' has no {missing} address and was skipped"
                    ),
                )
            )
            continue
        grouped.setdefault(list_key, set()).add(member_key)
        if edge.member_display_name:
            names.setdefault(member_key, edge.member_display_name)

    for diagnostic in diagnostics:
        log.warning("%s membership: %s", side.label, diagnostic.detail)
    return MembershipIndex(
        members=MappingProxyType({key: frozenset(value) for key, value in grouped.items()}),
        member_names=MappingProxyType(names),
        diagnostics=tuple(diagnostics),
    )


def diff_membership(
    list_address: str,
    on_prem_members: AbstractSet[str],
    cloud_members: AbstractSet[str],
    *,
    list_display_name: str = "",
    cloud_address: str | None = None,
) -> MembershipDiff:
    """Diff two already-normalized member sets for one list."""

    on_prem = frozenset(on_prem_members)
    cloud = frozenset(cloud_members)
    return MembershipDiff(
        list_address=list_address,
        list_display_name=list_display_name,
        only_on_prem=on_prem - cloud,
        only_cloud=cloud - on_prem,
        shared=on_prem & cloud,
        cloud_address=cloud_address,
    )


def diff_room_list_memberships(
    list_matches: Sequence[MatchResult[RoomList]],
    on_prem: MembershipIndex,
    cloud: MembershipIndex,
) -> tuple[MembershipDiff, ...]:
    """Diff every room list identity known to either side.

    Lists come first in match order. A cloud-only list reads its on-prem
    members under the cloud address. Lists that only appear in membership
    data follow, on-prem keys before cloud keys.
    """

    diffs: list[MembershipDiff] = []
    seen_on_prem: set[str] = set()
    seen_cloud: set[str] = set()
    for match in list_matches:
        cloud_key = match.cloud_address
        # membership rows may exist for a list whose on-prem record is missing
        on_prem_key = (
            normalize_address(match.on_prem.primary_address) if match.on_prem else cloud_key
        )
        if on_prem_key:
            seen_on_prem.add(on_prem_key)
        if cloud_key:
            seen_cloud.add(cloud_key)
        diffs.append(
            diff_membership(
                match.address,
                on_prem.members_of(on_prem_key),
                cloud.members_of(cloud_key),
                list_display_name=match.display_name,
                cloud_address=cloud_key,
            )
        )

    emitted = {diff.list_address for diff in diffs}
    leftovers = dict.fromkeys(
        [key for key in on_prem.members if key not in seen_on_prem]
        + [key for key in cloud.members if key not in seen_cloud]
    )
    for key in leftovers:
        if key in emitted:
            continue
        diffs.append(
            diff_membership(
                key,
                on_prem.members_of(key) if key not in seen_on_prem else _EMPTY,
                cloud.members_of(key) if key not in seen_cloud else _EMPTY,
                cloud_address=key if key in cloud.members else None,
            )
        )
        log.debug("Membership data references list %s without a list record", key)

    return tuple(diffs)
