"""
Google Search Console client.

Search Analytics only accepts absolute ``YYYY-MM-DD`` dates; relative
keywords must be resolved by the caller (see
:func:`slingshot.reporting.dates.resolve_date_param`).
"""

import logging
from typing import Any
from urllib.parse import quote

from slingshot.models import ReportQuery
from slingshot.reporting.dates import require_absolute_date

from .base import GoogleApiClient, require_identifier

logger = logging.getLogger(__name__)


class SearchConsoleClient(GoogleApiClient):
    """Search Console API client bound to one access token."""

    BASE_URL = "https://searchconsole.googleapis.com/webmasters/v3"

    def _site_path(self, site_url: str) -> str:
        # siteUrl is a path segment: "https://example.com/" or "sc-domain:example.com"
        site_url = require_identifier(site_url, "Site URL")
        return f"{self.BASE_URL}/sites/{quote(site_url, safe='')}"

    async def get_sites(self) -> list[dict[str, Any]]:
        """Return all sites verified for the token."""
        data = await self._request("GET", f"{self.BASE_URL}/sites")
        return data.get("siteEntry") or []

    async def query(self, site_url: str, query: ReportQuery) -> dict[str, Any]:
        """Run a Search Analytics query."""
        url = f"{self._site_path(site_url)}/searchAnalytics/query"
        require_absolute_date(query.start_date)
        require_absolute_date(query.end_date)
        data = await self._request("POST", url, json=query.to_search_console_body())
        logger.debug(
            f"Search Analytics {query.dimensions} for {site_url}: "
            f"{len(data.get('rows') or [])} rows"
        )
        return data

    async def get_search_analytics(
        self,
        site_url: str,
        start_date: str,
        end_date: str,
        dimensions: list[str] | None = None,
    ) -> dict[str, Any]:
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=dimensions or ["query"],
            row_limit=100,
        )
        return await self.query(site_url, query)

    async def get_search_analytics_by_date(
        self, site_url: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["date"],
            row_limit=1000,
        )
        return await self.query(site_url, query)

    async def get_top_queries(
        self, site_url: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["query"],
            row_limit=50,
        )
        return await self.query(site_url, query)

    async def get_top_pages(
        self, site_url: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["page"],
            row_limit=50,
        )
        return await self.query(site_url, query)

    async def get_country_data(
        self, site_url: str, start_date: str, end_date: str
    ) -> dict[str, Any]:
        query = ReportQuery(
            start_date=start_date,
            end_date=end_date,
            dimensions=["country"],
            row_limit=20,
        )
        return await self.query(site_url, query)

    async def get_sitemaps(self, site_url: str) -> list[dict[str, Any]]:
        """Return sitemaps submitted for ``site_url``."""
        data = await self._request("GET", f"{self._site_path(site_url)}/sitemaps")
        return data.get("sitemap") or []
