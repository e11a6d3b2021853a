"""Google OAuth, Analytics 4 and Search Console integration."""

from .analytics_client import AnalyticsClient
from .credential_store import CredentialStore, SqlCredentialStore
from .oauth import GoogleOAuthClient
from .search_console_client import SearchConsoleClient
from .token_resolver import TokenResolver

__all__ = [
    "AnalyticsClient",
    "CredentialStore",
    "GoogleOAuthClient",
    "SearchConsoleClient",
    "SqlCredentialStore",
    "TokenResolver",
]
