"""
FastAPI router for Google OAuth and stored provider tokens.

The OAuth ``state`` parameter carries the signed user id, so the callback
persists tokens server-side and the browser is redirected without any
token in the URL.
"""

import logging
from datetime import datetime
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Query
from fastapi.responses import RedirectResponse
from pydantic import BaseModel

from ..errors import InvalidCodeError, ProviderRequestError, ValidationError
from ..integrations.google import CredentialStore, GoogleOAuthClient
from ..integrations.google.oauth_state import create_state_jwt, parse_state_jwt
from ..models import GOOGLE_PROVIDER, SessionUser, TokenSet
from ..settings import Settings, get_settings
from ..utils.redaction import mask_token
from .dependencies import get_credential_store, get_current_user, get_oauth_client
from .responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


class GoogleTokensIn(BaseModel):
    access_token: str | None = None
    refresh_token: str | None = None
    # ISO string or unix timestamp (seconds or milliseconds)
    expires_at: datetime | None = None


def _setup_redirect(settings: Settings, **params: str) -> RedirectResponse:
    url = f"{settings.client_url.rstrip('/')}/setup?{urlencode(params)}"
    return RedirectResponse(url=url, status_code=302)


@router.get("/google")
async def begin_google_auth(
    user: SessionUser = Depends(get_current_user),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    settings: Settings = Depends(get_settings),
):
    """Redirect the user to the Google consent screen."""
    state = create_state_jwt(user.id, settings)
    return RedirectResponse(
        url=oauth_client.build_authorization_url(state=state), status_code=302
    )


@router.get("/google/url")
async def google_auth_url(
    user: SessionUser = Depends(get_current_user),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    settings: Settings = Depends(get_settings),
):
    """Return the consent URL for clients that navigate themselves."""
    state = create_state_jwt(user.id, settings)
    return success({"auth_url": oauth_client.build_authorization_url(state=state)})


@router.get("/google/callback")
async def google_oauth_callback(
    code: str | None = Query(None, description="Authorization code from Google"),
    state: str | None = Query(None, description="State token"),
    error: str | None = Query(None, description="OAuth error from Google"),
    settings: Settings = Depends(get_settings),
    oauth_client: GoogleOAuthClient = Depends(get_oauth_client),
    store: CredentialStore = Depends(get_credential_store),
):
    """
    Handle the Google OAuth2 callback.

    Exchanges the code, stores the tokens for the user named in ``state``
    and redirects back to the dashboard setup page.
    """
    if error:
        logger.error(f"OAuth error from Google: {error}")
        return _setup_redirect(settings, auth="error", reason="oauth_error")

    if not code:
        raise ValidationError("Authorization code is required")

    user_id = parse_state_jwt(state, settings)
    if not user_id:
        logger.error("Invalid or expired state token")
        return _setup_redirect(settings, auth="error", reason="invalid_state")

    try:
        tokens = await oauth_client.exchange_code(code)
    except InvalidCodeError as e:
        logger.error(f"Failed to exchange code for user {user_id}: {e.details}")
        return _setup_redirect(settings, auth="error", reason="exchange_failed")
    except ProviderRequestError as e:
        logger.error(f"Token endpoint failure for user {user_id}: {e.details}")
        return _setup_redirect(settings, auth="error", reason="provider_error")

    if not tokens.refresh_token:
        logger.warning(
            f"Google issued no refresh token for user {user_id}; "
            "the consent screen will be needed again once it expires"
        )

    await store.upsert(user_id, GOOGLE_PROVIDER, tokens)
    logger.info(f"Successfully connected Google for user {user_id}")
    return _setup_redirect(settings, auth="success")


@router.post("/google-tokens")
async def store_google_tokens(
    body: GoogleTokensIn,
    user: SessionUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Store Google tokens for the authenticated user."""
    if not body.access_token:
        raise ValidationError("Access token is required")

    logger.info(
        f"Storing Google tokens for user {user.id}: {mask_token(body.access_token)}"
    )
    await store.upsert(
        user.id,
        GOOGLE_PROVIDER,
        TokenSet(
            access_token=body.access_token,
            refresh_token=body.refresh_token,
            expires_at=body.expires_at,
        ),
    )
    return success({"message": "Tokens stored successfully"})


@router.get("/google-tokens")
async def get_google_tokens(
    user: SessionUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Describe the stored Google connection without exposing raw tokens."""
    credential = await store.get(user.id, GOOGLE_PROVIDER)
    return success(
        {
            "user_id": user.id,
            "email": user.email,
            "access_token_preview": mask_token(credential.access_token),
            "has_refresh_token": bool(credential.refresh_token),
            "expires_at": credential.expires_at,
            "is_expired": store.is_expired(credential),
        }
    )


@router.delete("/google-tokens")
async def delete_google_tokens(
    user: SessionUser = Depends(get_current_user),
    store: CredentialStore = Depends(get_credential_store),
):
    """Disconnect Google for the authenticated user."""
    await store.delete(user.id, GOOGLE_PROVIDER)
    return success({"message": "Google tokens deleted successfully"})
