"""Entity matching stage.

Responsibilities of this stage:
- prepare each side: skip records without identity, drop later duplicates
- join on-prem and cloud records by normalized primary address
- for room lists, retry unmatched on-prem records by exact display name
- return exactly one result per prepared record, in stable order

Indexes are built per call and discarded afterwards.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from roomsync.domain.model import (
    DiagnosticKind,
    DirectoryEntry,
    EntityKind,
    MatchMethod,
    Room,
    RoomList,
    Side,
)

from .contracts import Diagnostic, MatchOutcome, MatchResult
from .normalize import normalize_address

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping


log = logging.getLogger(__name__)


def index_by_address[T: DirectoryEntry](
    records: Iterable[T],
    *,
    side: Side,
    entity_kind: EntityKind,
) -> tuple[dict[str, T], tuple[Diagnostic, ...]]:
    """Index ``records`` by normalized address, first seen wins.

    The returned dict preserves input order of the kept records.
    """

    index: dict[str, T] = {}
    diagnostics: list[Diagnostic] = []
    for record in records:
        key = normalize_address(record.primary_address)
        if not key:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.MISSING_IDENTITY,
                    entity_kind=entity_kind,
                    side=side,
                    identity=record.display_name,
                    detail=f"'{record.display_name}' has no primary address and was skipped",
                )
            )
            continue
        if key in index:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.DUPLICATE_IDENTITY,
                    entity_kind=entity_kind,
                    side=side,
                    identity=key,
                    detail=(
                        f"'{record.display_name}' repeats address {key} already used by "
                        f"'{index[key].display_name}'; the later record was dropped"
                    ),
                )
            )
            continue
        index[key] = record

    for diagnostic in diagnostics:
        log.warning("%s %s: %s", side.label, entity_kind, diagnostic.detail)
    return index, tuple(diagnostics)


def match_rooms(on_prem: Iterable[Room], cloud: Iterable[Room]) -> MatchOutcome[Room]:
    return _match(on_prem, cloud, entity_kind=EntityKind.ROOM, display_name_fallback=False)


def match_room_lists(
    on_prem: Iterable[RoomList],
    cloud: Iterable[RoomList],
) -> MatchOutcome[RoomList]:
    return _match(on_prem, cloud, entity_kind=EntityKind.ROOM_LIST, display_name_fallback=True)


def _match[T: DirectoryEntry](
    on_prem: Iterable[T],
    cloud: Iterable[T],
    *,
    entity_kind: EntityKind,
    display_name_fallback: bool,
) -> MatchOutcome[T]:
    on_prem_index, on_prem_diagnostics = index_by_address(
        on_prem, side=Side.ON_PREM, entity_kind=entity_kind
    )
    cloud_index, cloud_diagnostics = index_by_address(
        cloud, side=Side.CLOUD, entity_kind=entity_kind
    )
    diagnostics = [*on_prem_diagnostics, *cloud_diagnostics]

    # on-prem key -> (cloud key, method)
    pairs: dict[str, tuple[str, MatchMethod]] = {
        key: (key, MatchMethod.ADDRESS) for key in on_prem_index if key in cloud_index
    }
    claimed = {cloud_key for cloud_key, _method in pairs.values()}

    if display_name_fallback:
        diagnostics.extend(
            _pair_by_display_name(
                on_prem_index,
                cloud_index,
                pairs=pairs,
                claimed=claimed,
                entity_kind=entity_kind,
            )
        )

    results: list[MatchResult[T]] = []
    for key, record in on_prem_index.items():
        pair = pairs.get(key)
        if pair is None:
            results.append(MatchResult(on_prem=record))
            continue
        cloud_key, method = pair
        results.append(MatchResult(on_prem=record, cloud=cloud_index[cloud_key], matched_by=method))
    results.extend(
        MatchResult(cloud=record) for key, record in cloud_index.items() if key not in claimed
    )

    log.debug(
        "Matched %s: on_prem=%s, cloud=%s, paired=%s",
        entity_kind,
        len(on_prem_index),
        len(cloud_index),
        len(pairs),
    )
    return MatchOutcome(results=tuple(results), diagnostics=tuple(diagnostics))


def _pair_by_display_name[T: DirectoryEntry](
    on_prem_index: Mapping[str, T],
    cloud_index: Mapping[str, T],
    *,
    pairs: dict[str, tuple[str, MatchMethod]],
    claimed: set[str],
    entity_kind: EntityKind,
) -> list[Diagnostic]:
    """Pair still-unmatched on-prem records by exact display name.

    Only cloud records not claimed by an address match are candidates. When a
    name is shared by several candidates, or several on-prem records compete
    for one, the first wins and the conflict is reported.
    """

    candidates_by_name: dict[str, list[str]] = {}
    for key, record in cloud_index.items():
        if key in claimed or not record.display_name:
            continue
        candidates_by_name.setdefault(record.display_name, []).append(key)

    diagnostics: list[Diagnostic] = []
    for key, record in on_prem_index.items():
        if key in pairs or not record.display_name:
            continue
        candidates = candidates_by_name.get(record.display_name)
        if not candidates:
            continue
        free = [candidate for candidate in candidates if candidate not in claimed]
        if not free:
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.AMBIGUOUS_FALLBACK,
                    entity_kind=entity_kind,
                    side=Side.ON_PREM,
                    identity=key,
                    detail=(
                        f"'{record.display_name}' ({key}) shares its display name with an "
                        "on-prem record that already claimed the cloud match"
                    ),
                )
            )
            continue

        chosen = free[0]
        pairs[key] = (chosen, MatchMethod.DISPLAY_NAME)
        claimed.add(chosen)
        diagnostics.append(
            Diagnostic(
                kind=DiagnosticKind.LOOKUP_FALLBACK_USED,
                entity_kind=entity_kind,
                side=Side.ON_PREM,
                identity=key,
                detail=f"'{record.display_name}' matched cloud address {chosen} by display name",
            )
        )
        if len(free) > 1:
            others = ", ".join(free[1:])
            diagnostics.append(
                Diagnostic(
                    kind=DiagnosticKind.AMBIGUOUS_FALLBACK,
                    entity_kind=entity_kind,
                    side=Side.CLOUD,
                    identity=key,
                    detail=(
                        f"'{record.display_name}' also names cloud records {others}; "
                        f"kept {chosen}"
                    ),
                )
            )

    for diagnostic in diagnostics:
        if diagnostic.kind is DiagnosticKind.LOOKUP_FALLBACK_USED:
            log.info("%s: %s", entity_kind, diagnostic.detail)
        else:
            log.warning("%s: %s", entity_kind, diagnostic.detail)
    return diagnostics
