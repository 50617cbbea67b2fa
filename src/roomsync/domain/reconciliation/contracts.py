"""Value types shared by the reconciliation stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, cast

from roomsync.domain.model import DirectoryEntry

from .normalize import normalize_address

if TYPE_CHECKING:
    from roomsync.domain.model import DiagnosticKind, EntityKind, MatchMethod, Side


@dataclass(frozen=True, slots=True, kw_only=True)
class MatchResult[T: DirectoryEntry]:
    """One entity after matching: paired, on-prem orphan or cloud orphan."""

    on_prem: T | None = None
    cloud: T | None = None
    matched_by: MatchMethod | None = None

    def __post_init__(self) -> None:
        if self.on_prem is None and self.cloud is None:
            raise ValueError("MatchResult requires at least one side")

    @property
    def matched(self) -> bool:
        return self.on_prem is not None and self.cloud is not None

    @property
    def primary(self) -> T:
        """The on-prem record when present, otherwise the cloud record."""

        if self.on_prem is not None:
            return self.on_prem
        return cast("T", self.cloud)

    @property
    def address(self) -> str:
        return normalize_address(self.primary.primary_address)

    @property
    def display_name(self) -> str:
        return self.primary.display_name

    @property
    def cloud_address(self) -> str | None:
        if self.cloud is None:
            return None
        return normalize_address(self.cloud.primary_address)


@dataclass(frozen=True, slots=True, kw_only=True)
class MembershipDiff:
    """Symmetric difference of member addresses for one room list."""

    list_address: str
    list_display_name: str = ""
    only_on_prem: frozenset[str] = frozenset()
    only_cloud: frozenset[str] = frozenset()
    shared: frozenset[str] = frozenset()
    cloud_address: str | None = None

    @property
    def has_differences(self) -> bool:
        return bool(self.only_on_prem or self.only_cloud)

    @property
    def on_prem_members(self) -> frozenset[str]:
        return self.only_on_prem | self.shared

    @property
    def cloud_members(self) -> frozenset[str]:
        return self.only_cloud | self.shared


@dataclass(frozen=True, slots=True, kw_only=True)
class Diagnostic:
    """Non-fatal note about data quality or source availability."""

    kind: DiagnosticKind
    entity_kind: EntityKind
    side: Side | None = None
    identity: str = ""
    detail: str = ""


@dataclass(frozen=True, slots=True)
class MatchOutcome[T: DirectoryEntry]:
    results: tuple[MatchResult[T], ...]
    diagnostics: tuple[Diagnostic, ...] = field(default=())

    @property
    def matched(self) -> tuple[MatchResult[T], ...]:
        return tuple(result for result in self.results if result.matched)
