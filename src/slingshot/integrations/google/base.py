"""Shared HTTP plumbing for Google reporting API clients."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from slingshot.errors import ProviderAuthError, ProviderRequestError, ValidationError
from slingshot.models import TokenSet
from slingshot.utils.redaction import mask_token

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0

TokenRefresher = Callable[[str], Awaitable[TokenSet]]


class GoogleApiClient:
    """
    Minimal async client for a Google REST API.

    One instance is built per request from a single access token. Errors are
    translated so that a provider 401 raises :class:`ProviderAuthError` and
    everything else raises :class:`ProviderRequestError` with the provider's
    ``error`` object attached as ``details``.

    When both ``refresh_token`` and ``token_refresher`` are given, the first
    401 triggers one refresh and one retry of the same call. Later 401s are
    raised as usual.
    """

    def __init__(
        self,
        access_token: str,
        refresh_token: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
        token_refresher: TokenRefresher | None = None,
    ) -> None:
        self.access_token = access_token
        self.refresh_token = refresh_token
        self.timeout = timeout
        self._transport = transport
        self._token_refresher = token_refresher
        self._refreshed = False

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.access_token}"}

    def _can_refresh(self) -> bool:
        if self._refreshed:
            return False
        return bool(self.refresh_token and self._token_refresher)

    async def _refresh_access_token(self) -> None:
        assert self._token_refresher is not None and self.refresh_token is not None
        self._refreshed = True
        tokens = await self._token_refresher(self.refresh_token)
        logger.info(
            f"Refreshed rejected token {mask_token(self.access_token)} -> "
            f"{mask_token(tokens.access_token)}"
        )
        self.access_token = tokens.access_token
        if tokens.refresh_token:
            self.refresh_token = tokens.refresh_token

    async def _send(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None,
        json: dict[str, Any] | None,
    ) -> httpx.Response:
        logger.debug(f"{method} {url} with token {mask_token(self.access_token)}")
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                return await client.request(
                    method, url, params=params, json=json, headers=self._headers()
                )
        except httpx.HTTPError as e:
            logger.error(f"Google API transport error for {url}: {e}")
            raise ProviderRequestError(
                "Failed to reach Google API", details=str(e) or type(e).__name__
            ) from e

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        resp = await self._send(method, url, params, json)
        if resp.status_code == 401 and self._can_refresh():
            await self._refresh_access_token()
            resp = await self._send(method, url, params, json)

        if resp.is_success:
            if not resp.content:
                return {}
            return resp.json()

        details = extract_error_details(resp)
        if resp.status_code == 401:
            logger.warning(f"Google API rejected token for {url}: {details}")
            raise ProviderAuthError("Google rejected the access token", details=details)
        logger.error(f"Google API error {resp.status_code} for {url}: {details}")
        raise ProviderRequestError(
            f"Google API request failed with status {resp.status_code}",
            details=details,
        )


def extract_error_details(resp: httpx.Response) -> Any:
    """Return the provider's embedded error payload, or the raw body."""
    try:
        payload = resp.json()
    except ValueError:
        return resp.text or resp.reason_phrase
    if isinstance(payload, dict) and "error" in payload:
        return payload["error"]
    return payload


def require_identifier(value: str | None, name: str) -> str:
    """Reject empty property ids and site URLs before calling out."""
    if value is None or not str(value).strip():
        raise ValidationError(f"{name} is required")
    return str(value).strip()
