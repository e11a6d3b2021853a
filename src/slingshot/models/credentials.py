from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import Field

from .base import BaseSlingshotModel

GOOGLE_PROVIDER = "google"


class TokenSet(BaseSlingshotModel):
    """Tokens returned by a provider token endpoint."""

    access_token: str = Field(description="Access token")
    refresh_token: str | None = Field(default=None, description="Refresh token")
    expires_in: int | None = Field(default=None, description="Lifetime in seconds")
    expires_at: datetime | None = Field(
        default=None, description="Access token expiration time"
    )
    scope: str | None = Field(default=None, description="Granted scopes")
    token_type: str = Field(default="Bearer", description="Token type")

    @classmethod
    def from_token_response(cls, data: dict[str, Any]) -> "TokenSet":
        """Create :class:`TokenSet` from a token endpoint response."""
        expires_in = int(data.get("expires_in") or 0)
        expires_at = (
            datetime.now(UTC) + timedelta(seconds=expires_in) if expires_in else None
        )
        return cls(
            access_token=str(data["access_token"]),
            refresh_token=data.get("refresh_token"),
            expires_in=expires_in or None,
            expires_at=expires_at,
            scope=data.get("scope"),
            token_type=str(data.get("token_type", "Bearer")),
        )


class Credential(BaseSlingshotModel):
    """Stored provider tokens for one user."""

    user_id: str = Field(description="Application user identifier")
    provider: str = Field(default=GOOGLE_PROVIDER, description="Token provider")
    access_token: str = Field(description="Access token")
    refresh_token: str | None = Field(default=None, description="Refresh token")
    expires_at: datetime | None = Field(
        default=None, description="Access token expiration time"
    )

    @property
    def is_expired(self) -> bool:
        """Return ``True`` if the token is known to be expired.

        A credential without ``expires_at`` is treated as valid.
        """
        return self.needs_refresh(0)

    def needs_refresh(self, skew_seconds: int = 60) -> bool:
        """Return ``True`` if the token expires within ``skew_seconds``."""
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return datetime.now(UTC) + timedelta(seconds=skew_seconds) >= expires_at


class SessionUser(BaseSlingshotModel):
    """Application user resolved from a session token."""

    id: str = Field(description="Subject of the session token")
    email: str | None = Field(default=None, description="User email")


class ProviderToken(BaseSlingshotModel):
    """Access token resolved for a single report request."""

    access_token: str = Field(description="Access token sent to the provider")
    refresh_token: str | None = Field(default=None, description="Refresh token")
    user_id: str | None = Field(
        default=None,
        description="Owner of a stored credential, None for raw bearers",
    )
