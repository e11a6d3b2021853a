"""Resolve a usable Google access token for a stored credential."""

import logging

from ...errors import ProviderAuthError
from ...models import GOOGLE_PROVIDER, Credential
from ...utils.redaction import mask_token
from .credential_store import CredentialStore
from .oauth import GoogleOAuthClient

logger = logging.getLogger(__name__)


class TokenResolver:
    """Loads stored credentials and refreshes them before they expire."""

    def __init__(
        self,
        store: CredentialStore,
        oauth_client: GoogleOAuthClient,
        refresh_skew_seconds: int = 60,
    ) -> None:
        self.store = store
        self.oauth_client = oauth_client
        self.refresh_skew_seconds = refresh_skew_seconds

    async def resolve(
        self, user_id: str, provider: str = GOOGLE_PROVIDER
    ) -> Credential:
        """
        Return a credential whose access token is currently usable.

        Raises:
            CredentialNotFoundError: If the user never connected the provider
            ProviderAuthError: If the token expired and cannot be refreshed
        """
        credential = await self.store.get(user_id, provider)

        if not credential.needs_refresh(self.refresh_skew_seconds):
            return credential

        logger.info(
            f"Credentials for user {user_id} expire at {credential.expires_at}, "
            f"has_refresh_token={bool(credential.refresh_token)}"
        )
        if not credential.refresh_token:
            logger.error(
                f"Credentials expired for user {user_id} but no refresh token available"
            )
            raise ProviderAuthError(
                "Google access expired and no refresh token is stored; reconnect Google"
            )

        tokens = await self.oauth_client.refresh(credential.refresh_token)
        refreshed = await self.store.upsert(user_id, provider, tokens)
        logger.info(
            f"Refreshed credentials for user {user_id}: "
            f"{mask_token(credential.access_token)} -> "
            f"{mask_token(refreshed.access_token)}"
        )
        return refreshed
