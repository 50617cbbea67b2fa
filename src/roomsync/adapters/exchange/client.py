"""HTTP client for the Exchange Online admin API.

Cmdlets are executed through the ``InvokeCommand`` REST endpoint with an
app-only token obtained by the OAuth2 client-credentials grant.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from roomsync.adapters.http_resilience import ResilientClient
from roomsync.config.exchange import get_exchange_config

from .schema import CommandResponse, ErrorResponse, TokenErrorResponse, TokenResponse

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping

    from roomsync.config.exchange import ExchangeConfig
    from roomsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

# Refresh this many seconds before the token actually expires
_TOKEN_EXPIRY_MARGIN_SECONDS = 60.0


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


class ExchangeAPIError(RuntimeError):
    """Raised when the admin API rejects a request or returns an unusable payload."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.status_code = status_code


@dataclass(slots=True, frozen=True)
class CmdletCall:
    name: str
    parameters: Mapping[str, object] = field(default_factory=dict)

    @property
    def read_only(self) -> bool:
        return self.name.startswith("Get-")

    def body(self) -> dict[str, object]:
        return {"CmdletInput": {"CmdletName": self.name, "Parameters": dict(self.parameters)}}


@dataclass(slots=True)
class _AccessToken:
    value: str
    expires_at: float

    @property
    def expired(self) -> bool:
        return time.monotonic() >= self.expires_at


@dataclass(slots=True)
class ExchangeAdminClient:
    config: ExchangeConfig = field(default_factory=get_exchange_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )
    _token: _AccessToken | None = field(default=None, init=False, repr=False)

    def invoke(
        self,
        cmdlet: str,
        parameters: Mapping[str, object] | None = None,
    ) -> list[dict[str, Any]]:
        """Run one cmdlet and return every output row across all pages."""

        return asyncio.run(self._invoke_async(CmdletCall(cmdlet, parameters or {})))

    async def _invoke_async(self, call: CmdletCall) -> list[dict[str, Any]]:
        async with self.client_factory(self.config.resilience) as client:
            token = await self._ensure_token(client)
            return await self._invoke_paged(client, token, call)

    async def _ensure_token(self, client: ResilientClient) -> str:
        if self._token is not None and not self._token.expired:
            return self._token.value

        log.debug("Requesting admin API token for tenant %s", self.config.tenant_id)
        try:
            response = await client.post(
                self.config.token_url,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self.config.client_id,
                    "client_secret": self.config.client_secret,
                    "scope": self.config.scope,
                },
            )
        except httpx.HTTPError as exc:
            raise ExchangeAPIError(f"Token request failed: {exc}") from exc

        payload = _json_or_none(response)
        if response.is_error or not isinstance(payload, dict) or "access_token" not in payload:
            if isinstance(payload, dict) and "error" in payload:
                error = TokenErrorResponse.model_validate(payload)
                log.error(f"Token request rejected {error.error}: {error.error_description}")
                raise ExchangeAPIError(
                    error.error_description or error.error,
                    code=error.error,
                    status_code=response.status_code,
                )
            raise ExchangeAPIError(
                "Unexpected token response payload", status_code=response.status_code
            )

        token = TokenResponse.model_validate(payload)
        self._token = _AccessToken(
            value=token.access_token,
            expires_at=time.monotonic() + token.expires_in - _TOKEN_EXPIRY_MARGIN_SECONDS,
        )
        return token.access_token

    async def _invoke_paged(
        self,
        client: ResilientClient,
        token: str,
        call: CmdletCall,
    ) -> list[dict[str, Any]]:
        rows: list[dict[str, Any]] = []
        url: str | None = self.config.invoke_url
        page = 0
        while url is not None:
            page += 1
            response = await self._perform_request(client=client, url=url, token=token, call=call)
            rows.extend(response.value)
            url = response.next_link
        log.debug("%s returned %s rows in %s pages", call.name, len(rows), page)
        return rows

    async def _perform_request(
        self,
        *,
        client: ResilientClient,
        url: str,
        token: str,
        call: CmdletCall,
    ) -> CommandResponse:
        try:
            response = await client.post(
                url,
                json=call.body(),
                headers={"Authorization": f"Bearer {token}"},
                cache=call.read_only,
            )
        except httpx.HTTPError as exc:
            raise ExchangeAPIError(f"{call.name} request failed: {exc}") from exc

        payload = _json_or_none(response)
        if isinstance(payload, dict) and isinstance(payload.get("error"), dict):
            error = ErrorResponse.model_validate(payload).error
            log.error(f"Admin API error {error.code} running {call.name}: {error.message}")
            raise ExchangeAPIError(
                error.message or f"{call.name} failed",
                code=error.code or None,
                status_code=response.status_code,
            )
        if response.is_error:
            raise ExchangeAPIError(
                f"{call.name} failed with HTTP {response.status_code}",
                status_code=response.status_code,
            )
        if response.status_code == httpx.codes.NO_CONTENT:
            return CommandResponse()
        if not isinstance(payload, dict):
            raise ExchangeAPIError(f"Unexpected {call.name} response payload")

        try:
            return CommandResponse.model_validate(payload)
        except ValidationError as exc:
            raise ExchangeAPIError(f"Malformed {call.name} response: {exc}") from exc


def _json_or_none(response: httpx.Response) -> object:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return None
