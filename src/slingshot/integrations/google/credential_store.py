"""
Credential store for provider OAuth tokens.
"""

import logging
from abc import ABC, abstractmethod

from cryptography.fernet import Fernet, InvalidToken

from ...db import TokenService, UserToken
from ...errors import CredentialNotFoundError, ProviderAuthError
from ...models import GOOGLE_PROVIDER, Credential, TokenSet
from ...utils.redaction import mask_token

logger = logging.getLogger(__name__)


class CredentialStore(ABC):
    """Abstract interface for storing provider tokens per user."""

    @abstractmethod
    async def upsert(
        self, user_id: str, provider: str, tokens: TokenSet
    ) -> Credential:
        """Create or replace the credential for ``(user_id, provider)``."""
        pass

    @abstractmethod
    async def get(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> Credential:
        """Return the credential or raise :class:`CredentialNotFoundError`."""
        pass

    @abstractmethod
    async def delete(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> None:
        """Delete the credential for ``(user_id, provider)``."""
        pass

    @staticmethod
    def is_expired(credential: Credential) -> bool:
        """Return ``True`` iff ``expires_at`` is set and in the past."""
        return credential.is_expired


class SqlCredentialStore(CredentialStore):
    """Credential store backed by :class:`TokenService` with Fernet encryption."""

    def __init__(self, encryption_key: str, token_service: TokenService):
        self.fernet = Fernet(encryption_key.encode())
        self.token_service = token_service

    def _encrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self.fernet.encrypt(value.encode()).decode()

    def _decrypt(self, value: str | None) -> str | None:
        if value is None:
            return None
        return self.fernet.decrypt(value.encode()).decode()

    async def upsert(
        self, user_id: str, provider: str, tokens: TokenSet
    ) -> Credential:
        """Create or replace the credential for ``(user_id, provider)``."""
        await self.token_service.set_tokens(
            user_id,
            provider,
            self._encrypt(tokens.access_token),
            self._encrypt(tokens.refresh_token),
            tokens.expires_at,
        )
        logger.info(
            f"Saved {provider} tokens for user {user_id}: "
            f"access={mask_token(tokens.access_token)}, "
            f"has_refresh_token={bool(tokens.refresh_token)}"
        )
        return Credential(
            user_id=user_id,
            provider=provider,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )

    async def get(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> Credential:
        """Return the credential or raise :class:`CredentialNotFoundError`."""
        row = await self.token_service.get_tokens(user_id, provider)
        if row is None:
            logger.info(f"No {provider} credentials found for user {user_id}")
            raise CredentialNotFoundError(f"No {provider} tokens found for user")
        return self._to_credential(row)

    def _to_credential(self, row: UserToken) -> Credential:
        try:
            access_token = self._decrypt(row.access_token_enc)
            refresh_token = self._decrypt(row.refresh_token_enc)
        except InvalidToken as e:
            logger.error(
                f"Failed to decrypt {row.provider} credentials for user {row.user_id}"
            )
            raise ProviderAuthError(
                "Stored credentials are unreadable; reconnect the account"
            ) from e
        assert access_token is not None
        return Credential(
            user_id=row.user_id,
            provider=row.provider,
            access_token=access_token,
            refresh_token=refresh_token,
            expires_at=row.expires_at,
        )

    async def delete(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> None:
        """Delete the credential for ``(user_id, provider)``."""
        await self.token_service.delete_tokens(user_id, provider)
        logger.info(f"Deleted {provider} credentials for user {user_id}")
