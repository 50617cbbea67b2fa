"""Exchange Online admin API adapter."""

from __future__ import annotations

from .client import CmdletCall, ExchangeAdminClient, ExchangeAPIError
from .directory import (
    ExchangeDirectory,
    ExchangeProvisioner,
    build_exchange_directory,
    build_exchange_provisioner,
)
from .schema import CommandResponse, RecipientPayload
from .translator import parse_membership, parse_room, parse_room_list

__all__ = [
    "CmdletCall",
    "CommandResponse",
    "ExchangeAPIError",
    "ExchangeAdminClient",
    "ExchangeDirectory",
    "ExchangeProvisioner",
    "RecipientPayload",
    "build_exchange_directory",
    "build_exchange_provisioner",
    "parse_membership",
    "parse_room",
    "parse_room_list",
]
