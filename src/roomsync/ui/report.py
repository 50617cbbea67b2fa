"""Render reconciliation summaries as HTML and JSON documents."""

from __future__ import annotations

import csv
import html
import json
from dataclasses import dataclass
from datetime import datetime
from logging import getLogger
from typing import TYPE_CHECKING

from roomsync.config.storage import REPORT_PREFIX, timestamped_name
from roomsync.domain.model import EntityStatus

if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping, Sequence
    from pathlib import Path

    from roomsync.domain.migration import MigrationBatchRequest
    from roomsync.domain.reconciliation import EntityCounts, Summary
    from roomsync.domain.remediation import RemediationReport

log = getLogger(__name__)

_STYLE = (
    "body{font:14px system-ui,Segoe UI,Arial;margin:24px;color:#1f2328}"
    "h1{font-size:22px}h2{font-size:17px;margin-top:28px}"
    "table{border-collapse:collapse;width:100%;margin-bottom:12px}"
    "th,td{border:1px solid #d0d7de;padding:6px;text-align:left;vertical-align:top}"
    "th{background:#f4f6f8}tr:nth-child(even){background:#fafafa}"
    ".cards{display:flex;gap:12px;flex-wrap:wrap}"
    ".card{border:1px solid #d0d7de;border-radius:6px;padding:10px 14px;min-width:180px}"
    ".banner{background:#fff4e5;border:1px solid #f0b429;padding:10px;border-radius:6px}"
    ".status-not_migrated,.status-not_created{color:#b42318}"
    ".status-created_with_mismatch{color:#b54708}"
    ".status-migrated_or_synced,.status-created_no_mismatch{color:#067647}"
)

_ROOM_STATUSES = (EntityStatus.MIGRATED_OR_SYNCED, EntityStatus.NOT_MIGRATED)
_ROOM_LIST_STATUSES = (
    EntityStatus.CREATED_NO_MISMATCH,
    EntityStatus.CREATED_WITH_MISMATCH,
    EntityStatus.NOT_CREATED,
)


@dataclass(frozen=True, slots=True)
class ReportPaths:
    html: Path
    json: Path


def _table(headers: Sequence[str], rows: Iterable[Sequence[object]]) -> str:
    thead = "".join(f"<th>{html.escape(header)}</th>" for header in headers)
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>" for row in rows
    )
    if not body:
        body = f'<tr><td colspan="{len(headers)}">None</td></tr>'
    return f"<table><thead><tr>{thead}</tr></thead><tbody>{body}</tbody></table>"


def _text(value: object) -> str:
    if value is None:
        return ""
    return html.escape(str(value))


def _status(status: EntityStatus) -> str:
    return f'<span class="status-{status.value}">{html.escape(status.label)}</span>'


def _counts_card(title: str, counts: EntityCounts, statuses: Mapping[EntityStatus, int]) -> str:
    lines = [
        f"On-prem: {counts.on_prem_total}",
        f"Cloud: {counts.cloud_total}",
        f"Matched: {counts.matched}",
        f"Only on-prem: {counts.only_on_prem}",
        f"Only cloud: {counts.only_cloud}",
    ]
    lines.extend(f"{status.label}: {count}" for status, count in statuses.items())
    items = "<br>".join(html.escape(line) for line in lines)
    return f'<div class="card"><strong>{html.escape(title)}</strong><br>{items}</div>'


def render_html(summary: Summary, *, generated_at: datetime | None = None) -> str:
    moment = generated_at or datetime.now()  # noqa: DTZ005
    parts = [
        "<!DOCTYPE html>",
        '<html lang="en"><head><meta charset="utf-8">',
        "<title>Room comparison</title>",
        f"<style>{_STYLE}</style></head><body>",
        "<h1>Room and room list comparison</h1>",
        f"<p>Generated {html.escape(moment.strftime('%Y-%m-%d %H:%M:%S'))}</p>",
    ]
    if summary.partial_data:
        parts.append(
            '<p class="banner"><strong>Partial data.</strong> At least one collection could '
            "not be loaded; counts below only reflect what was available. See warnings.</p>"
        )

    room_statuses = {s: summary.room_statuses.get(s, 0) for s in _ROOM_STATUSES}
    list_statuses = {s: summary.room_list_statuses.get(s, 0) for s in _ROOM_LIST_STATUSES}
    parts.append('<div class="cards">')
    parts.append(_counts_card("Rooms", summary.rooms, room_statuses))
    parts.append(_counts_card("Room lists", summary.room_lists, list_statuses))
    parts.append(
        '<div class="card"><strong>Membership</strong><br>'
        f"Lists compared: {summary.lists_total}<br>"
        f"Lists with differences: {summary.lists_with_differences}<br>"
        f"Members only on-prem: {summary.members_only_on_prem}<br>"
        f"Members only cloud: {summary.members_only_cloud}</div>"
    )
    parts.append("</div>")

    if summary.warnings:
        parts.append(f"<h2>Warnings ({len(summary.warnings)})</h2>")
        parts.append(
            _table(
                ("Kind", "Object", "Side", "Detail"),
                (
                    (
                        _text(w.kind),
                        _text(w.entity_kind),
                        _text(w.side.label if w.side else ""),
                        _text(w.detail),
                    )
                    for w in summary.warnings
                ),
            )
        )

    parts.append(f"<h2>Rooms ({len(summary.room_rows)})</h2>")
    parts.append(
        _table(
            ("Display name", "Address", "Status", "On-prem address", "Cloud address", "Attributes"),
            (
                (
                    _text(row.display_name),
                    _text(row.address),
                    _status(row.status),
                    _text(row.on_prem_address),
                    _text(row.cloud_address),
                    _text(", ".join(f"{k}={v}" for k, v in sorted(row.attributes.items()))),
                )
                for row in summary.room_rows
            ),
        )
    )

    parts.append(f"<h2>Room lists ({len(summary.room_list_rows)})</h2>")
    parts.append(
        _table(
            (
                "Display name",
                "Address",
                "Status",
                "Matched by",
                "Cloud address",
                "On-prem members",
                "Cloud members",
                "Only on-prem",
                "Only cloud",
            ),
            (
                (
                    _text(row.display_name),
                    _text(row.address),
                    _status(row.status),
                    _text(row.matched_by),
                    _text(row.cloud_address),
                    row.on_prem_members,
                    row.cloud_members,
                    *(
                        (row.only_on_prem, row.only_cloud)
                        if row.members_compared
                        else ("not compared", "not compared")
                    ),
                )
                for row in summary.room_list_rows
            ),
        )
    )

    parts.append(f"<h2>Membership differences ({len(summary.member_mismatch_rows)})</h2>")
    parts.append(
        _table(
            ("Room list", "List address", "Member", "Member address", "Present on"),
            (
                (
                    _text(row.list_display_name),
                    _text(row.list_address),
                    _text(row.member_display_name),
                    _text(row.member_address),
                    _text(row.present_on.label),
                )
                for row in summary.member_mismatch_rows
            ),
        )
    )
    parts.append("</body></html>")
    return "\n".join(parts)


def summary_to_dict(summary: Summary) -> dict[str, object]:
    def counts(value: EntityCounts) -> dict[str, int]:
        return {
            "on_prem_total": value.on_prem_total,
            "cloud_total": value.cloud_total,
            "matched": value.matched,
            "only_on_prem": value.only_on_prem,
            "only_cloud": value.only_cloud,
        }

    return {
        "partial_data": summary.partial_data,
        "rooms": counts(summary.rooms),
        "room_lists": counts(summary.room_lists),
        "room_statuses": {str(k): v for k, v in summary.room_statuses.items()},
        "room_list_statuses": {str(k): v for k, v in summary.room_list_statuses.items()},
        "membership": {
            "lists_total": summary.lists_total,
            "lists_with_differences": summary.lists_with_differences,
            "members_only_on_prem": summary.members_only_on_prem,
            "members_only_cloud": summary.members_only_cloud,
        },
        "room_rows": [
            {
                "display_name": row.display_name,
                "address": row.address,
                "status": str(row.status),
                "on_prem_address": row.on_prem_address,
                "cloud_address": row.cloud_address,
                "attributes": dict(row.attributes),
            }
            for row in summary.room_rows
        ],
        "room_list_rows": [
            {
                "display_name": row.display_name,
                "address": row.address,
                "status": str(row.status),
                "matched_by": str(row.matched_by) if row.matched_by else None,
                "cloud_address": row.cloud_address,
                "on_prem_members": row.on_prem_members,
                "cloud_members": row.cloud_members,
                "only_on_prem": row.only_on_prem,
                "only_cloud": row.only_cloud,
                "members_compared": row.members_compared,
            }
            for row in summary.room_list_rows
        ],
        "member_mismatch_rows": [
            {
                "list_display_name": row.list_display_name,
                "list_address": row.list_address,
                "member_display_name": row.member_display_name,
                "member_address": row.member_address,
                "present_on": str(row.present_on),
            }
            for row in summary.member_mismatch_rows
        ],
        "warnings": [
            {
                "kind": str(w.kind),
                "entity_kind": str(w.entity_kind),
                "side": str(w.side) if w.side else None,
                "identity": w.identity,
                "detail": w.detail,
            }
            for w in summary.warnings
        ],
    }


def write_report(
    summary: Summary,
    directory: Path,
    *,
    generated_at: datetime | None = None,
) -> ReportPaths:
    """Write the HTML and JSON report using the timestamped naming convention."""

    moment = generated_at or datetime.now()  # noqa: DTZ005
    directory.mkdir(parents=True, exist_ok=True)
    html_path = directory / timestamped_name(REPORT_PREFIX, ".html", moment=moment)
    json_path = directory / timestamped_name(REPORT_PREFIX, ".json", moment=moment)
    html_path.write_text(render_html(summary, generated_at=moment), encoding="utf-8")
    with json_path.open("w", encoding="utf-8") as handle:
        json.dump(summary_to_dict(summary), handle, indent=2)
    log.info("Wrote report %s", html_path)
    return ReportPaths(html=html_path, json=json_path)


def write_remediation_log(report: RemediationReport, path: Path) -> Path:
    """Write one CSV line per list action and per member action."""

    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(["ListAddress", "ListDisplayName", "Member", "Outcome", "Detail"])
        for action in report.actions:
            writer.writerow(
                [action.list_address, action.display_name, "", action.outcome, action.detail]
            )
            for member in action.members:
                writer.writerow(
                    [
                        action.list_address,
                        action.display_name,
                        member.member_address,
                        member.outcome,
                        member.detail,
                    ]
                )
    return path


def write_migration_csv(request: MigrationBatchRequest, path: Path) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(request.to_csv(), encoding="utf-8", newline="")
    return path
