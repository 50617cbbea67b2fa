"""Application orchestration entry points."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING

from roomsync.adapters.exchange import build_exchange_directory, build_exchange_provisioner
from roomsync.adapters.snapshot import build_csv_snapshot_source
from roomsync.config import get_snapshot_config, get_storage_config, optional_env_var
from roomsync.config.storage import (
    MIGRATION_BATCH_PREFIX,
    REMEDIATION_LOG_PREFIX,
    timestamped_name,
)
from roomsync.domain.collection import collect_live, collect_snapshot
from roomsync.domain.migration import plan_migration_batch
from roomsync.domain.model import EntityKind
from roomsync.domain.reconciliation import ReconciliationEngine
from roomsync.domain.remediation import RemediationAbortedError, remediate_missing_room_lists
from roomsync.ui.report import write_migration_csv, write_remediation_log, write_report

if TYPE_CHECKING:
    from pathlib import Path

    from roomsync.domain.collection import DirectoryCollections
    from roomsync.domain.migration import MigrationBatchReceipt, MigrationBatchRequest
    from roomsync.domain.ports import (
        LiveDirectorySource,
        MigrationBatchSubmitter,
        RoomListProvisioner,
        SnapshotSource,
    )
    from roomsync.domain.reconciliation import ReconciliationResult
    from roomsync.domain.remediation import RemediationReport
    from roomsync.ui.report import ReportPaths


log = getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ComparisonRun:
    result: ReconciliationResult
    on_prem: DirectoryCollections
    cloud: DirectoryCollections
    report: ReportPaths | None = None


@dataclass(frozen=True, slots=True)
class MigrationBatchRun:
    request: MigrationBatchRequest
    csv_path: Path | None = None
    receipt: MigrationBatchReceipt | None = None


def _output_dir(output_dir: Path | None) -> Path:
    return output_dir or get_storage_config().reports_dir()


def compare_directories(
    *,
    snapshot_source: SnapshotSource | None = None,
    live_source: LiveDirectorySource | None = None,
    snapshot_dir: Path | None = None,
    output_dir: Path | None = None,
    engine: ReconciliationEngine | None = None,
    write: bool = True,
) -> ComparisonRun:
    """Load both sides, reconcile them and write the report."""

    effective_snapshot = snapshot_source or build_csv_snapshot_source(
        get_snapshot_config(snapshot_dir)
    )
    effective_live = live_source or build_exchange_directory()
    log.info("Starting room comparison")

    on_prem = collect_snapshot(effective_snapshot)
    cloud = collect_live(effective_live)
    result = (engine or ReconciliationEngine()).reconcile(on_prem, cloud)

    report = write_report(result.summary, _output_dir(output_dir)) if write else None
    summary = result.summary
    log.info(
        "Finished comparison: rooms matched=%s/%s, room lists matched=%s/%s, "
        "lists with differences=%s, partial=%s",
        summary.rooms.matched,
        summary.rooms.on_prem_total,
        summary.room_lists.matched,
        summary.room_lists.on_prem_total,
        summary.lists_with_differences,
        summary.partial_data,
    )
    return ComparisonRun(result=result, on_prem=on_prem, cloud=cloud, report=report)


def create_missing_room_lists(
    *,
    snapshot_source: SnapshotSource | None = None,
    live_source: LiveDirectorySource | None = None,
    provisioner: RoomListProvisioner | None = None,
    snapshot_dir: Path | None = None,
    output_dir: Path | None = None,
    dry_run: bool = False,
) -> RemediationReport:
    """Create cloud room lists classified as not created and replay their members."""

    run = compare_directories(
        snapshot_source=snapshot_source,
        live_source=live_source,
        snapshot_dir=snapshot_dir,
        output_dir=output_dir,
    )
    if any(entry.entity_kind is EntityKind.ROOM_LIST for entry in run.cloud.unavailable):
        raise RemediationAbortedError(
            "Cloud room lists could not be loaded; refusing to create room lists"
        )
    if run.cloud.degraded:
        log.warning("Cloud data is partial; room list membership may be incomplete")

    report = remediate_missing_room_lists(
        run.result.room_list_matches,
        run.on_prem.memberships,
        provisioner or build_exchange_provisioner(),
        dry_run=dry_run,
    )
    log_path = _output_dir(output_dir) / timestamped_name(REMEDIATION_LOG_PREFIX, ".csv")
    write_remediation_log(report, log_path)
    log.info("Wrote remediation log %s", log_path)
    return report


def start_migration_batch(
    *,
    name: str | None = None,
    submit: bool = False,
    snapshot_source: SnapshotSource | None = None,
    live_source: LiveDirectorySource | None = None,
    submitter: MigrationBatchSubmitter | None = None,
    source_endpoint: str | None = None,
    target_delivery_domain: str | None = None,
    snapshot_dir: Path | None = None,
    output_dir: Path | None = None,
) -> MigrationBatchRun:
    """Export not-migrated rooms as a batch CSV and optionally submit the batch."""

    run = compare_directories(
        snapshot_source=snapshot_source,
        live_source=live_source,
        snapshot_dir=snapshot_dir,
        output_dir=output_dir,
    )
    batch_name = name or f"RoomMigration-{datetime.now():%Y%m%d-%H%M%S}"  # noqa: DTZ005
    request = plan_migration_batch(
        run.result.room_matches,
        name=batch_name,
        source_endpoint=source_endpoint or optional_env_var("ROOMSYNC_MIGRATION_ENDPOINT"),
        target_delivery_domain=target_delivery_domain
        or optional_env_var("ROOMSYNC_TARGET_DELIVERY_DOMAIN"),
    )
    if not request.rooms:
        log.info("No rooms left to migrate")
        return MigrationBatchRun(request=request)

    csv_path = write_migration_csv(
        request, _output_dir(output_dir) / timestamped_name(MIGRATION_BATCH_PREFIX, ".csv")
    )
    log.info("Wrote migration batch CSV with %s rooms to %s", len(request.rooms), csv_path)
    if not submit:
        return MigrationBatchRun(request=request, csv_path=csv_path)

    receipt = (submitter or build_exchange_provisioner()).start_migration_batch(request)
    log.info("Submitted migration batch %s (status=%s)", receipt.identity, receipt.status or "?")
    return MigrationBatchRun(request=request, csv_path=csv_path, receipt=receipt)


__all__ = [
    "ComparisonRun",
    "MigrationBatchRun",
    "compare_directories",
    "create_missing_room_lists",
    "start_migration_batch",
]
