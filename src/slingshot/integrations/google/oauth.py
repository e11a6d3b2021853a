"""
Google OAuth2 web-server flow.

Builds the consent URL, exchanges authorization codes and refreshes access
tokens. Nothing here persists tokens; callers hand the results to a
:class:`~slingshot.integrations.google.credential_store.CredentialStore`.
"""

import asyncio
import logging
from datetime import UTC
from typing import Any
from urllib.parse import urlencode

import httpx
from google.auth.exceptions import (  # type: ignore[import-untyped]
    RefreshError,
    TransportError,
)
from google.auth.transport.requests import Request  # type: ignore[import-untyped]
from google.oauth2.credentials import Credentials  # type: ignore[import-untyped]

from slingshot.errors import (
    ConfigError,
    InvalidCodeError,
    ProviderAuthError,
    ProviderRequestError,
)
from slingshot.models import TokenSet
from slingshot.settings import Settings
from slingshot.utils.redaction import mask_token

logger = logging.getLogger(__name__)


class GoogleOAuthClient:
    """OAuth2 client for the Google consent and token endpoints."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        settings: Settings,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.client_id = settings.google_client_id
        self.client_secret = settings.google_client_secret
        self.redirect_uri = settings.google_redirect_uri
        self.scopes = list(settings.google_oauth_scopes)
        self.timeout = settings.google_api_timeout
        self._transport = transport

    def _require_configured(self) -> None:
        if not (self.client_id and self.client_secret and self.redirect_uri):
            logger.error("Missing required Google OAuth configuration")
            raise ConfigError(
                "OAuth configuration error: missing "
                "GOOGLE_CLIENT_ID/GOOGLE_CLIENT_SECRET/GOOGLE_REDIRECT_URI"
            )

    def build_authorization_url(
        self, scopes: list[str] | None = None, state: str | None = None
    ) -> str:
        """
        Build the Google consent URL.

        Offline access is always requested and consent is always forced so
        Google reliably issues a refresh token.

        Args:
            scopes: Scopes to request (defaults to the configured scopes)
            state: Optional state parameter for CSRF protection

        Returns:
            Authorization URL for the user to visit
        """
        self._require_configured()
        params: dict[str, Any] = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": " ".join(scopes or self.scopes),
            "access_type": "offline",
            "include_granted_scopes": "true",
            "prompt": "consent select_account",
        }
        if state is not None:
            params["state"] = state
        return f"{self.AUTH_BASE_URL}?{urlencode(params)}"

    async def exchange_code(self, code: str | None) -> TokenSet:
        """
        Exchange an authorization code for tokens.

        Raises:
            ConfigError: If the OAuth client is not configured
            InvalidCodeError: If the code is missing or rejected
            ProviderRequestError: If the token endpoint fails otherwise
        """
        self._require_configured()
        if not code:
            raise InvalidCodeError("Authorization code is required")

        data = {
            "grant_type": "authorization_code",
            "code": code,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        try:
            async with httpx.AsyncClient(
                transport=self._transport, timeout=self.timeout
            ) as client:
                resp = await client.post(self.TOKEN_URL, data=data)
        except httpx.HTTPError as e:
            logger.error(f"Token exchange transport error: {e}")
            raise ProviderRequestError(
                "Failed to reach Google token endpoint", details=str(e)
            ) from e

        payload = _json_or_text(resp)
        if 400 <= resp.status_code < 500:
            logger.error(f"Token exchange rejected ({resp.status_code}): {payload}")
            raise InvalidCodeError(
                "Failed to exchange code for tokens", details=payload
            )
        if resp.status_code >= 500:
            logger.error(f"Token endpoint failed ({resp.status_code}): {payload}")
            raise ProviderRequestError(
                "Google token endpoint failed", details=payload
            )
        if not isinstance(payload, dict) or not payload.get("access_token"):
            raise InvalidCodeError("Failed to get access token")

        tokens = TokenSet.from_token_response(payload)
        logger.info(
            f"Exchanged code: access={mask_token(tokens.access_token)}, "
            f"has_refresh_token={bool(tokens.refresh_token)}"
        )
        return tokens

    async def refresh(self, refresh_token: str) -> TokenSet:
        """
        Obtain a fresh access token using ``refresh_token``.

        Raises:
            ConfigError: If the OAuth client is not configured
            ProviderAuthError: If Google rejects the refresh token
            ProviderRequestError: If the token endpoint cannot be reached
        """
        self._require_configured()
        credentials = Credentials(
            token=None,
            refresh_token=refresh_token,
            token_uri=self.TOKEN_URL,
            client_id=self.client_id,
            client_secret=self.client_secret,
            scopes=self.scopes,
        )
        try:
            await asyncio.to_thread(credentials.refresh, Request())
        except RefreshError as e:
            logger.error(f"Failed to refresh Google credentials: {e}")
            raise ProviderAuthError(
                "Google rejected the refresh token; reconnect Google",
                details=str(e),
            ) from e
        except TransportError as e:
            logger.error(f"Token endpoint unreachable during refresh: {e}")
            raise ProviderRequestError(
                "Failed to reach Google token endpoint", details=str(e)
            ) from e

        # google-auth reports expiry as naive UTC
        expires_at = (
            credentials.expiry.replace(tzinfo=UTC) if credentials.expiry else None
        )
        logger.info(f"Refreshed access token {mask_token(credentials.token)}")
        return TokenSet(
            access_token=credentials.token,
            refresh_token=credentials.refresh_token or refresh_token,
            expires_at=expires_at,
        )


def _json_or_text(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except ValueError:
        return resp.text
