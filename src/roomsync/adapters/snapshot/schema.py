"""Pydantic models for rows of the on-prem snapshot exports.

Known columns map to named fields; every other column is kept so it can be
shown next to the record in the report.
"""

from __future__ import annotations

from typing import ClassVar

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


def _none_to_blank(value: object) -> object:
    if value is None:
        return ""
    if isinstance(value, str):
        return value.strip()
    return value


class SnapshotRow(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # Each entry lists header names of which at least one must be present.
    required_columns: ClassVar[tuple[tuple[str, ...], ...]] = ()

    def extra_attributes(self) -> dict[str, str]:
        attributes: dict[str, str] = {}
        for key, value in (self.model_extra or {}).items():
            if not key or value is None:
                continue
            text = str(value).strip()
            if text:
                attributes[key] = text
        return attributes


class RoomCsvRow(SnapshotRow):
    required_columns: ClassVar[tuple[tuple[str, ...], ...]] = (
        ("DisplayName", "Name"),
        ("PrimarySmtpAddress", "EmailAddress"),
    )

    display_name: str = Field(default="", validation_alias=AliasChoices("DisplayName", "Name"))
    primary_address: str = Field(
        default="",
        validation_alias=AliasChoices("PrimarySmtpAddress", "EmailAddress"),
    )

    _normalize_blank = field_validator("display_name", "primary_address", mode="before")(
        _none_to_blank
    )


class RoomListCsvRow(RoomCsvRow):
    pass


class MembershipCsvRow(SnapshotRow):
    required_columns: ClassVar[tuple[tuple[str, ...], ...]] = (
        ("RoomListAddress", "RoomListPrimarySmtpAddress", "ListAddress"),
        ("MemberAddress", "MemberPrimarySmtpAddress", "PrimarySmtpAddress"),
    )

    list_address: str = Field(
        default="",
        validation_alias=AliasChoices(
            "RoomListAddress", "RoomListPrimarySmtpAddress", "ListAddress"
        ),
    )
    member_address: str = Field(
        default="",
        validation_alias=AliasChoices(
            "MemberAddress", "MemberPrimarySmtpAddress", "PrimarySmtpAddress"
        ),
    )
    member_display_name: str = Field(
        default="",
        validation_alias=AliasChoices("MemberDisplayName", "MemberName", "DisplayName"),
    )
    member_kind: str = Field(
        default="",
        validation_alias=AliasChoices(
            "MemberType", "RecipientTypeDetails", "RecipientType"
        ),
    )

    _normalize_blank = field_validator(
        "list_address",
        "member_address",
        "member_display_name",
        "member_kind",
        mode="before",
    )(_none_to_blank)
