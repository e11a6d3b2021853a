"""
FastAPI dependencies.

Clients and stores are built per request from settings rather than held in
module-level singletons; tests swap any of them via
``app.dependency_overrides``.
"""

import logging
from collections.abc import Callable

from fastapi import Depends, Header, Request

from ..db import DatabaseManager
from ..errors import MissingCredentialError
from ..integrations.google import (
    AnalyticsClient,
    CredentialStore,
    GoogleOAuthClient,
    SearchConsoleClient,
    SqlCredentialStore,
    TokenResolver,
)
from ..integrations.google.base import TokenRefresher
from ..models import GOOGLE_PROVIDER, ProviderToken, SessionUser
from ..session import looks_like_jwt, verify_session_token
from ..settings import Settings, get_settings
from ..utils.redaction import mask_token

logger = logging.getLogger(__name__)

AnalyticsClientFactory = Callable[[ProviderToken], AnalyticsClient]
SearchConsoleClientFactory = Callable[[ProviderToken], SearchConsoleClient]


def get_database_manager(
    request: Request, settings: Settings = Depends(get_settings)
) -> DatabaseManager:
    """Return the app's database manager, creating it on first use."""
    db = getattr(request.app.state, "db", None)
    if db is None:
        db = DatabaseManager(settings.database_url)
        request.app.state.db = db
    return db


def get_credential_store(
    settings: Settings = Depends(get_settings),
    db: DatabaseManager = Depends(get_database_manager),
) -> CredentialStore:
    """Dependency to get credential store."""
    return SqlCredentialStore(
        encryption_key=settings.db_encryption_key,
        token_service=db.get_token_service(),
    )


def get_oauth_client(settings: Settings = Depends(get_settings)) -> GoogleOAuthClient:
    """Dependency to get the Google OAuth client."""
    return GoogleOAuthClient(settings)


def get_token_resolver(
    settings: Settings = Depends(get_settings),
    store: CredentialStore = Depends(get_credential_store),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> TokenResolver:
    return TokenResolver(
        store, oauth_client, refresh_skew_seconds=settings.token_refresh_skew_seconds
    )


def get_bearer_token(authorization: str | None = Header(None)) -> str:
    """Extract the bearer credential or reject the request."""
    if not authorization or not authorization.startswith("Bearer "):
        raise MissingCredentialError("Missing or invalid authorization header")
    token = authorization.removeprefix("Bearer ").strip()
    if not token:
        raise MissingCredentialError("Access token is required")
    return token


def get_current_user(
    token: str = Depends(get_bearer_token),
    settings: Settings = Depends(get_settings),
) -> SessionUser:
    """Resolve the application user from the session bearer token."""
    return verify_session_token(token, settings)


async def get_provider_token(
    token: str = Depends(get_bearer_token),
    x_refresh_token: str | None = Header(None),
    settings: Settings = Depends(get_settings),
    resolver: TokenResolver = Depends(get_token_resolver),
) -> ProviderToken:
    """
    Resolve the Google access token for a report request.

    A session JWT is looked up in the credential store and refreshed before
    it expires. Any other bearer is forwarded to Google as-is; when an
    ``x-refresh-token`` accompanies it, a 401 from Google is answered with one
    refresh and one retry.
    """
    if looks_like_jwt(token):
        user = verify_session_token(token, settings)
        credential = await resolver.resolve(user.id, GOOGLE_PROVIDER)
        return ProviderToken(
            access_token=credential.access_token,
            refresh_token=credential.refresh_token,
            user_id=user.id,
        )

    logger.debug(
        f"Using caller-supplied Google token {mask_token(token)}, "
        f"refresh token {mask_token(x_refresh_token)}"
    )
    return ProviderToken(access_token=token, refresh_token=x_refresh_token)


def _token_refresher(
    token: ProviderToken, settings: Settings, oauth_client: GoogleOAuthClient
) -> TokenRefresher | None:
    """Refresh hook for caller-supplied tokens.

    Stored credentials (``user_id`` set) are refreshed ahead of expiry by the
    resolver, so only raw bearers with an ``x-refresh-token`` get one.
    """
    if token.user_id is not None or not token.refresh_token:
        return None
    if not settings.google_oauth_configured:
        return None
    return oauth_client.refresh


def get_analytics_client_factory(
    settings: Settings = Depends(get_settings),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> AnalyticsClientFactory:
    def factory(token: ProviderToken) -> AnalyticsClient:
        return AnalyticsClient(
            token.access_token,
            token.refresh_token,
            timeout=settings.google_api_timeout,
            token_refresher=_token_refresher(token, settings, oauth_client),
        )

    return factory


def get_search_console_client_factory(
    settings: Settings = Depends(get_settings),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
) -> SearchConsoleClientFactory:
    def factory(token: ProviderToken) -> SearchConsoleClient:
        return SearchConsoleClient(
            token.access_token,
            token.refresh_token,
            timeout=settings.google_api_timeout,
            token_refresher=_token_refresher(token, settings, oauth_client),
        )

    return factory
