from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path  # noqa: TC003

from roomsync.domain.collection import DirectoryCollections, UnavailableCollection
from roomsync.domain.model import EntityKind, Side
from roomsync.domain.reconciliation import Summary, reconcile
from roomsync.domain.remediation import (
    ActionOutcome,
    MemberAction,
    RemediationReport,
    RoomListAction,
)
from roomsync.ui.report import render_html, summary_to_dict, write_remediation_log, write_report
from tests.helpers.directory import make_members, make_room, make_room_list

MOMENT = datetime(2024, 5, 1, 9, 30, 0)  # noqa: DTZ001


def _summary(*, unavailable: tuple[UnavailableCollection, ...] = ()) -> Summary:
    on_prem = DirectoryCollections(
        side=Side.ON_PREM,
        rooms=(make_room("<Board> & Co", "board@x.com", Office="HQ"),),
        room_lists=(make_room_list("L", "l@x.com"),),
        memberships=tuple(make_members("l@x.com", "board@x.com")),
    )
    cloud = DirectoryCollections(
        side=Side.CLOUD,
        room_lists=(make_room_list("L", "l@x.com"),),
        unavailable=unavailable,
    )
    return reconcile(on_prem, cloud).summary


def test_render_html_escapes_values_and_marks_status() -> None:
    document = render_html(_summary(), generated_at=MOMENT)

    assert "&lt;Board&gt; &amp; Co" in document
    assert "<Board>" not in document
    assert "Generated 2024-05-01 09:30:00" in document
    assert '<span class="status-not_migrated">Not migrated</span>' in document
    assert '<span class="status-created_with_mismatch">' in document
    assert "Office=HQ" in document
    assert "Partial data" not in document


def test_render_html_shows_partial_data_banner_and_warnings() -> None:
    summary = _summary(
        unavailable=(
            UnavailableCollection(side=Side.CLOUD, entity_kind=EntityKind.ROOM, detail="HTTP 503"),
        )
    )

    document = render_html(summary, generated_at=MOMENT)

    assert "Partial data." in document
    assert "Warnings (1)" in document
    assert "HTTP 503" in document


def test_render_html_marks_lists_whose_members_were_not_compared() -> None:
    summary = _summary(
        unavailable=(
            UnavailableCollection(
                side=Side.CLOUD,
                entity_kind=EntityKind.MEMBERSHIP,
                detail="timeout",
                list_address="l@x.com",
            ),
        )
    )

    document = render_html(summary, generated_at=MOMENT)

    assert "<td>not compared</td><td>not compared</td>" in document
    assert '<span class="status-created_with_mismatch">' not in document
    (row,) = summary_to_dict(summary)["room_list_rows"]
    assert row["members_compared"] is False


def test_summary_to_dict_is_json_serializable() -> None:
    payload = summary_to_dict(_summary())

    decoded = json.loads(json.dumps(payload))
    assert decoded["membership"]["lists_with_differences"] == 1
    assert decoded["member_mismatch_rows"] == [
        {
            "list_display_name": "L",
            "list_address": "l@x.com",
            "member_display_name": "BOARD",
            "member_address": "board@x.com",
            "present_on": "on_prem",
        }
    ]
    assert decoded["room_rows"][0]["attributes"] == {"Office": "HQ"}


def test_write_report_uses_timestamped_names(tmp_path: Path) -> None:
    paths = write_report(_summary(), tmp_path / "reports", generated_at=MOMENT)

    assert paths.html.name == "RoomComparison_20240501-093000.html"
    assert paths.json.name == "RoomComparison_20240501-093000.json"
    assert paths.html.exists()
    assert json.loads(paths.json.read_text(encoding="utf-8"))["partial_data"] is False


def test_write_remediation_log_lists_every_action(tmp_path: Path) -> None:
    report = RemediationReport(
        actions=(
            RoomListAction(
                list_address="l@x.com",
                display_name="L",
                outcome=ActionOutcome.CREATED,
                members=(
                    MemberAction(member_address="a@x.com", outcome=ActionOutcome.ADDED),
                    MemberAction(
                        member_address="b@x.com",
                        outcome=ActionOutcome.FAILED,
                        detail="not found",
                    ),
                ),
            ),
        )
    )

    path = write_remediation_log(report, tmp_path / "log.csv")

    lines = path.read_text(encoding="utf-8").splitlines()
    assert lines == [
        "ListAddress,ListDisplayName,Member,Outcome,Detail",
        "l@x.com,L,,created,",
        "l@x.com,L,a@x.com,added,",
        "l@x.com,L,b@x.com,failed,not found",
    ]
