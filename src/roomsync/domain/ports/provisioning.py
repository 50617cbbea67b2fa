"""Ports for best-effort changes on the cloud side."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from roomsync.domain.migration import MigrationBatchReceipt, MigrationBatchRequest
    from roomsync.domain.model import RoomList


class ProvisioningError(RuntimeError):
    """Raised when a cloud-side create or add command fails."""


@runtime_checkable
class RoomListProvisioner(Protocol):
    def create_room_list(self, room_list: RoomList) -> None: ...

    def add_room_list_member(self, list_identity: str, member_address: str) -> None: ...


@runtime_checkable
class MigrationBatchSubmitter(Protocol):
    """Fire-and-forget hand-off of rooms to the cloud migration service."""

    def start_migration_batch(self, request: MigrationBatchRequest) -> MigrationBatchReceipt: ...


__all__ = ["MigrationBatchSubmitter", "ProvisioningError", "RoomListProvisioner"]
