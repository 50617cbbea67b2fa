"""Translate Exchange Online recipient payloads into domain records."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from roomsync.domain.model import Room, RoomList, RoomListMembership

from .schema import RecipientPayload

type Payload = RecipientPayload | Mapping[str, Any]


def _coerce(payload: Payload) -> RecipientPayload:
    if isinstance(payload, RecipientPayload):
        return payload
    return RecipientPayload.model_validate(payload)


def parse_room(payload: Payload) -> Room:
    recipient = _coerce(payload)
    return Room(
        display_name=recipient.display_name,
        primary_address=recipient.primary_smtp_address,
        attributes=recipient.extra_attributes(),
    )


def parse_room_list(payload: Payload) -> RoomList:
    recipient = _coerce(payload)
    return RoomList(
        display_name=recipient.display_name,
        primary_address=recipient.primary_smtp_address,
        attributes=recipient.extra_attributes(),
    )


def parse_membership(list_identity: str, payload: Payload) -> RoomListMembership:
    recipient = _coerce(payload)
    return RoomListMembership(
        list_address=list_identity,
        member_address=recipient.primary_smtp_address,
        member_display_name=recipient.display_name,
        member_kind=recipient.kind,
    )
