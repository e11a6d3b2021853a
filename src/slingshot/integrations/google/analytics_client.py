"""
Google Analytics 4 client.

Wraps the GA4 Admin API (accounts and properties) and the GA4 Data API
(reports). Methods return provider-native JSON; shaping for display happens
in :mod:`slingshot.reporting.normalizer`.
"""

import logging
from typing import Any

from slingshot.models import ReportQuery
from slingshot.reporting.dates import validate_date_param

from .base import GoogleApiClient, require_identifier

logger = logging.getLogger(__name__)

# Order matters: the normalizer reads totals and row values by position.
REPORT_METRICS = [
    "sessions",
    "activeUsers",
    "screenPageViews",
    "bounceRate",
    "averageSessionDuration",
    "conversions",
]
TOP_PAGES_METRICS = ["screenPageViews", "sessions", "bounceRate"]
TOP_PAGES_LIMIT = 20


class AnalyticsClient(GoogleApiClient):
    """GA4 Admin and Data API client bound to one access token."""

    ADMIN_URL = "https://analyticsadmin.googleapis.com/v1beta"
    DATA_URL = "https://analyticsdata.googleapis.com/v1beta"
    SUMMARY_PAGE_SIZE = 200

    async def list_accounts(self) -> list[dict[str, Any]]:
        """Return all GA4 accounts visible to the token."""
        data = await self._request("GET", f"{self.ADMIN_URL}/accounts")
        return data.get("accounts") or []

    async def list_properties(
        self, account_id: str | None = None
    ) -> list[dict[str, Any]]:
        """
        List GA4 properties.

        Without ``account_id`` every account summary is walked, so the
        caller sees properties across all accessible accounts.
        """
        if account_id:
            return await self._list_account_properties(account_id)

        properties: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"pageSize": self.SUMMARY_PAGE_SIZE}
            if page_token:
                params["pageToken"] = page_token
            data = await self._request(
                "GET", f"{self.ADMIN_URL}/accountSummaries", params=params
            )
            for summary in data.get("accountSummaries") or []:
                for prop in summary.get("propertySummaries") or []:
                    properties.append(
                        {
                            "name": prop.get("property"),
                            "displayName": prop.get("displayName"),
                            "parent": summary.get("name"),
                        }
                    )
            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.info(f"Found {len(properties)} GA4 properties")
        return properties

    async def _list_account_properties(self, account_id: str) -> list[dict[str, Any]]:
        account_id = account_id.removeprefix("accounts/")
        properties: list[dict[str, Any]] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {"filter": f"parent:accounts/{account_id}"}
            if page_token:
                params["pageToken"] = page_token
            data = await self._request(
                "GET", f"{self.ADMIN_URL}/properties", params=params
            )
            properties.extend(data.get("properties") or [])
            page_token = data.get("nextPageToken")
            if not page_token:
                return properties

    def _property_path(self, property_id: str) -> str:
        property_id = require_identifier(property_id, "Property ID")
        return f"properties/{property_id.removeprefix('properties/')}"

    async def run_report(self, property_id: str, query: ReportQuery) -> dict[str, Any]:
        """Run an arbitrary GA4 report."""
        path = self._property_path(property_id)
        validate_date_param(query.start_date)
        validate_date_param(query.end_date)
        return await self._request(
            "POST", f"{self.DATA_URL}/{path}:runReport", json=query.to_ga4_body()
        )

    async def get_realtime_report(self, property_id: str) -> dict[str, Any]:
        """Active users and page views in the last 30 minutes, by country."""
        path = self._property_path(property_id)
        body = {
            "metrics": [{"name": "activeUsers"}, {"name": "screenPageViews"}],
            "dimensions": [{"name": "country"}],
        }
        return await self._request(
            "POST", f"{self.DATA_URL}/{path}:runRealtimeReport", json=body
        )

    async def get_report(
        self, property_id: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        """Daily traffic report with a totals row."""
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["date"],
            metrics=REPORT_METRICS,
            order_by_dimension="date",
            keep_empty_rows=True,
            with_totals=True,
        )
        return await self.run_report(property_id, query)

    async def get_top_pages(
        self, property_id: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        """Most viewed pages, ordered by page views."""
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["pagePath", "pageTitle"],
            metrics=TOP_PAGES_METRICS,
            order_by="screenPageViews",
            row_limit=TOP_PAGES_LIMIT,
            keep_empty_rows=True,
        )
        return await self.run_report(property_id, query)
