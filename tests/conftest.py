"""
Shared pytest configuration and fixtures for the test suite.
"""

import os
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from cryptography.fernet import Fernet

from slingshot.errors import CredentialNotFoundError
from slingshot.integrations.google import CredentialStore
from slingshot.models import GOOGLE_PROVIDER, Credential, TokenSet
from slingshot.settings import Settings

TEST_JWT_SECRET = "test-secret"
TEST_FERNET_KEY = Fernet.generate_key().decode()

# Ensure required secrets are available for tests
os.environ.setdefault("JWT_SECRET", TEST_JWT_SECRET)
os.environ.setdefault("DB_ENCRYPTION_KEY", TEST_FERNET_KEY)


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "google: marks tests that interact with Google APIs"
    )


@pytest.fixture
def settings():
    """Fully configured settings that ignore the process environment."""
    return Settings(
        client_url="http://localhost:5173",
        google_client_id="client-id",
        google_client_secret="client-secret",
        google_redirect_uri="http://localhost:3000/auth/google/callback",
        database_url="sqlite+aiosqlite:///:memory:",
        db_encryption_key=TEST_FERNET_KEY,
        jwt_secret=TEST_JWT_SECRET,
    )


@pytest.fixture
def make_session_token(settings):
    """Issue session JWTs the way the auth provider does."""

    def _make(sub="user-1", email="user@example.com", expires_in=3600, **claims):
        payload = {
            "sub": sub,
            "email": email,
            "aud": settings.jwt_audience,
            "exp": datetime.now(UTC) + timedelta(seconds=expires_in),
            **claims,
        }
        return jwt.encode(payload, settings.jwt_secret, algorithm="HS256")

    return _make


class FakeCredentialStore(CredentialStore):
    """In-memory credential store."""

    def __init__(self):
        self.data: dict[tuple[str, str], Credential] = {}

    async def upsert(self, user_id: str, provider: str, tokens: TokenSet) -> Credential:
        credential = Credential(
            user_id=user_id,
            provider=provider,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            expires_at=tokens.expires_at,
        )
        self.data[(user_id, provider)] = credential
        return credential

    async def get(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> Credential:
        try:
            return self.data[(user_id, provider)]
        except KeyError:
            raise CredentialNotFoundError(
                f"No {provider} tokens found for user"
            ) from None

    async def delete(self, user_id: str, provider: str = GOOGLE_PROVIDER) -> None:
        self.data.pop((user_id, provider), None)


@pytest.fixture
def credential_store():
    return FakeCredentialStore()
