"""Pydantic models describing Exchange Online admin API payloads."""

from __future__ import annotations

from logging import getLogger
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

log = getLogger(__name__)

_IGNORED_PREFIXES = ("@odata", "@")


def _none_to_blank(value: object) -> object:
    if value is None:
        return ""
    return value


def _stringify(value: object) -> str | None:
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        items: list[object] = value  # pyright: ignore[reportUnknownVariableType]
        return ";".join(str(item) for item in items if item is not None)
    if isinstance(value, dict):
        return None
    return str(value)


class ExchangeBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class TokenResponse(ExchangeBaseModel):
    access_token: str
    token_type: str = "Bearer"
    expires_in: int = 3599


class TokenErrorResponse(ExchangeBaseModel):
    error: str
    error_description: str = ""


class ErrorDetail(ExchangeBaseModel):
    code: str = ""
    message: str = ""


class ErrorResponse(ExchangeBaseModel):
    error: ErrorDetail


class CommandResponse(ExchangeBaseModel):
    """One page of cmdlet output."""

    value: list[dict[str, Any]] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="@odata.nextLink")


class RecipientPayload(BaseModel):
    """A recipient row (room mailbox, room list or list member).

    Unmodelled properties are kept and surface as record attributes.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    display_name: str = Field(default="", alias="DisplayName")
    primary_smtp_address: str = Field(default="", alias="PrimarySmtpAddress")
    recipient_type: str = Field(default="", alias="RecipientType")
    recipient_type_details: str = Field(default="", alias="RecipientTypeDetails")

    _normalize_blank = field_validator(
        "display_name",
        "primary_smtp_address",
        "recipient_type",
        "recipient_type_details",
        mode="before",
    )(_none_to_blank)

    @property
    def kind(self) -> str:
        return self.recipient_type_details or self.recipient_type

    def extra_attributes(self) -> dict[str, str]:
        attributes: dict[str, str] = {}
        for key, value in (self.model_extra or {}).items():
            if key.startswith(_IGNORED_PREFIXES):
                continue
            text = _stringify(value)
            if text:
                attributes[key] = text
        return attributes


class MigrationBatchPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    identity: str = Field(default="", alias="Identity")
    status: str = Field(default="", alias="Status")

    @field_validator("identity", "status", mode="before")
    @classmethod
    def _coerce_text(cls, value: object) -> object:
        # Status arrives as {"Value": "..."} on some tenants
        if isinstance(value, dict) and "Value" in value:
            return str(value["Value"])  # pyright: ignore[reportUnknownArgumentType]
        return _none_to_blank(value)
