from __future__ import annotations

from pathlib import Path  # noqa: TC003
from types import SimpleNamespace

import pytest

from roomsync.app import MigrationBatchRun
from roomsync.domain.migration import MigrationBatchRequest
from roomsync.domain.remediation import RemediationReport
from roomsync.ui import cli


def test_compare_passes_directories(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    captured: dict[str, object] = {}

    def fake_compare(**kwargs: object) -> SimpleNamespace:
        captured.update(kwargs)
        return SimpleNamespace(report=None)

    monkeypatch.setattr(cli, "compare_directories", fake_compare)

    cli.main(["compare", "--snapshot-dir", str(tmp_path), "--output-dir", str(tmp_path / "out")])

    assert captured == {"snapshot_dir": tmp_path, "output_dir": tmp_path / "out"}


def test_create_room_lists_forwards_dry_run(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_create(**kwargs: object) -> RemediationReport:
        captured.update(kwargs)
        return RemediationReport(dry_run=True)

    monkeypatch.setattr(cli, "create_missing_room_lists", fake_create)

    cli.main(["-v", "create-room-lists", "--dry-run"])

    assert captured["dry_run"] is True
    assert captured["snapshot_dir"] is None


def test_migration_batch_forwards_options(monkeypatch: pytest.MonkeyPatch) -> None:
    captured: dict[str, object] = {}

    def fake_batch(**kwargs: object) -> MigrationBatchRun:
        captured.update(kwargs)
        return MigrationBatchRun(request=MigrationBatchRequest(name="Rooms-1"))

    monkeypatch.setattr(cli, "start_migration_batch", fake_batch)

    cli.main(
        [
            "migration-batch",
            "--name",
            "Rooms-1",
            "--submit",
            "--source-endpoint",
            "OnPremEndpoint",
        ]
    )

    assert captured["name"] == "Rooms-1"
    assert captured["submit"] is True
    assert captured["source_endpoint"] == "OnPremEndpoint"
    assert captured["target_delivery_domain"] is None


def test_missing_snapshot_dir_exits_with_usage_error(tmp_path: Path) -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["compare", "--snapshot-dir", str(tmp_path / "missing")])

    assert excinfo.value.code == 2


def test_blank_batch_name_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["migration-batch", "--name", "  "])

    assert excinfo.value.code == 2


def test_unknown_command_exits_with_usage_error() -> None:
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["sync"])

    assert excinfo.value.code == 2


def test_runtime_failure_exits_with_error(monkeypatch: pytest.MonkeyPatch) -> None:
    def failing_compare(**_: object) -> SimpleNamespace:
        raise RuntimeError("boom")

    monkeypatch.setattr(cli, "compare_directories", failing_compare)

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["compare"])

    assert excinfo.value.code == 1
