from __future__ import annotations

from roomsync.domain.migration import MIGRATION_CSV_HEADER, plan_migration_batch
from roomsync.domain.reconciliation import match_rooms
from tests.helpers.directory import addresses, make_room


def test_plan_collects_only_not_migrated_on_prem_rooms() -> None:
    matches = match_rooms(
        [make_room("A", "a@x.com"), make_room("B", " b@x.com ")],
        [make_room("A", "a@x.com"), make_room("C", "c@x.com")],
    ).results

    request = plan_migration_batch(
        matches,
        name="Rooms-1",
        source_endpoint="OnPremEndpoint",
        target_delivery_domain="contoso.mail.onmicrosoft.com",
    )

    assert request.name == "Rooms-1"
    assert addresses(request.rooms) == [" b@x.com "]
    assert request.addresses == ("b@x.com",)
    assert request.source_endpoint == "OnPremEndpoint"
    assert request.target_delivery_domain == "contoso.mail.onmicrosoft.com"
    assert request.auto_start


def test_plan_is_empty_when_everything_migrated() -> None:
    matches = match_rooms([make_room("A", "a@x.com")], [make_room("A", "A@x.com")]).results

    request = plan_migration_batch(matches, name="Rooms-2")

    assert request.rooms == ()
    assert request.to_csv() == f"{MIGRATION_CSV_HEADER}\r\n"


def test_to_csv_lists_one_address_per_line() -> None:
    matches = match_rooms([make_room("A", "a@x.com"), make_room("B", "b@x.com")], []).results

    csv_text = plan_migration_batch(matches, name="Rooms-3").to_csv()

    assert csv_text == "EmailAddress\r\na@x.com\r\nb@x.com\r\n"
