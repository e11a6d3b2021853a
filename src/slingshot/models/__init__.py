"""
Shared data models for Slingshot.

Credential models back the token store; report models describe provider
queries and the normalized records served to the dashboard.
"""

from .credentials import (
    GOOGLE_PROVIDER,
    Credential,
    ProviderToken,
    SessionUser,
    TokenSet,
)
from .reports import (
    DashboardTotals,
    ReportQuery,
    SearchConsolePoint,
    SearchConsoleTotals,
    TrafficPoint,
)

__all__ = [
    "GOOGLE_PROVIDER",
    # Credentials
    "Credential",
    "ProviderToken",
    "SessionUser",
    "TokenSet",
    # Reports
    "DashboardTotals",
    "ReportQuery",
    "SearchConsolePoint",
    "SearchConsoleTotals",
    "TrafficPoint",
]
