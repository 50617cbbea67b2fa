"""Exchange Online implementations of the directory and provisioning ports."""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from roomsync.domain.migration import MigrationBatchReceipt
from roomsync.domain.ports import ProvisioningError, SourceUnavailableError

from .client import ExchangeAdminClient, ExchangeAPIError
from .schema import MigrationBatchPayload
from .translator import parse_membership, parse_room, parse_room_list

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from roomsync.domain.migration import MigrationBatchRequest
    from roomsync.domain.model import Room, RoomList, RoomListMembership
    from roomsync.domain.ports import (
        LiveDirectorySource,
        MigrationBatchSubmitter,
        RoomListProvisioner,
    )

log = getLogger(__name__)

UNLIMITED = "Unlimited"
GET_MAILBOX = "Get-Mailbox"
GET_DISTRIBUTION_GROUP = "Get-DistributionGroup"
GET_DISTRIBUTION_GROUP_MEMBER = "Get-DistributionGroupMember"
NEW_DISTRIBUTION_GROUP = "New-DistributionGroup"
ADD_DISTRIBUTION_GROUP_MEMBER = "Add-DistributionGroupMember"
NEW_MIGRATION_BATCH = "New-MigrationBatch"


@dataclass(slots=True)
class ExchangeDirectory:
    """Live view of rooms and room lists in Exchange Online."""

    client: ExchangeAdminClient = field(default_factory=ExchangeAdminClient)

    def load_rooms(self) -> list[Room]:
        rows = self._query(
            GET_MAILBOX,
            {"RecipientTypeDetails": "RoomMailbox", "ResultSize": UNLIMITED},
        )
        return _translate(rows, parse_room, what="room mailbox")

    def load_room_lists(self) -> list[RoomList]:
        rows = self._query(
            GET_DISTRIBUTION_GROUP,
            {"RecipientTypeDetails": "RoomList", "ResultSize": UNLIMITED},
        )
        return _translate(rows, parse_room_list, what="room list")

    def load_membership(self, list_identity: str) -> list[RoomListMembership]:
        rows = self._query(
            GET_DISTRIBUTION_GROUP_MEMBER,
            {"Identity": list_identity, "ResultSize": UNLIMITED},
        )
        return _translate(
            rows,
            lambda row: parse_membership(list_identity, row),
            what=f"member of {list_identity}",
        )

    def _query(self, cmdlet: str, parameters: Mapping[str, object]) -> list[dict[str, Any]]:
        try:
            return self.client.invoke(cmdlet, parameters)
        except ExchangeAPIError as exc:
            log.warning(f"{cmdlet} failed: {exc}")
            raise SourceUnavailableError(f"{cmdlet} failed: {exc}") from exc


@dataclass(slots=True)
class ExchangeProvisioner:
    """Creates room lists and submits migration batches in Exchange Online."""

    client: ExchangeAdminClient = field(default_factory=ExchangeAdminClient)

    def create_room_list(self, room_list: RoomList) -> None:
        parameters: dict[str, object] = {
            "Name": room_list.display_name or room_list.primary_address,
            "DisplayName": room_list.display_name,
            "PrimarySmtpAddress": room_list.primary_address.strip(),
            "RoomList": True,
        }
        alias = room_list.attributes.get("Alias")
        if alias:
            parameters["Alias"] = alias
        self._command(NEW_DISTRIBUTION_GROUP, parameters)
        log.info("Created cloud room list %s", room_list.primary_address)

    def add_room_list_member(self, list_identity: str, member_address: str) -> None:
        self._command(
            ADD_DISTRIBUTION_GROUP_MEMBER,
            {
                "Identity": list_identity,
                "Member": member_address,
                "BypassSecurityGroupManagerCheck": True,
            },
        )

    def start_migration_batch(self, request: MigrationBatchRequest) -> MigrationBatchReceipt:
        parameters: dict[str, object] = {
            "Name": request.name,
            "CSVData": base64.b64encode(request.to_csv().encode("utf-8")).decode("ascii"),
            "AutoStart": request.auto_start,
        }
        if request.source_endpoint:
            parameters["SourceEndpoint"] = request.source_endpoint
        if request.target_delivery_domain:
            parameters["TargetDeliveryDomain"] = request.target_delivery_domain

        rows = self._command(NEW_MIGRATION_BATCH, parameters)
        if not rows:
            return MigrationBatchReceipt(identity=request.name)
        payload = MigrationBatchPayload.model_validate(rows[0])
        return MigrationBatchReceipt(
            identity=payload.identity or request.name, status=payload.status
        )

    def _command(self, cmdlet: str, parameters: Mapping[str, object]) -> list[dict[str, Any]]:
        try:
            return self.client.invoke(cmdlet, parameters)
        except ExchangeAPIError as exc:
            raise ProvisioningError(f"{cmdlet} failed: {exc}") from exc


def _translate[T](
    rows: list[dict[str, Any]],
    parse: Callable[[dict[str, Any]], T],
    *,
    what: str,
) -> list[T]:
    records: list[T] = []
    for row in rows:
        try:
            records.append(parse(row))
        except ValidationError as exc:
            log.warning(f"Skipping malformed {what} payload: {exc}")
    return records


def build_exchange_directory(client: ExchangeAdminClient | None = None) -> ExchangeDirectory:
    return ExchangeDirectory(client=client or ExchangeAdminClient())


def build_exchange_provisioner(client: ExchangeAdminClient | None = None) -> ExchangeProvisioner:
    return ExchangeProvisioner(client=client or ExchangeAdminClient())


if TYPE_CHECKING:
    _directory_check: LiveDirectorySource = ExchangeDirectory()
    _provisioner_check: RoomListProvisioner = ExchangeProvisioner()
    _submitter_check: MigrationBatchSubmitter = ExchangeProvisioner()
