from datetime import UTC, datetime, timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from slingshot.api.dependencies import (
    get_analytics_client_factory,
    get_credential_store,
    get_search_console_client_factory,
)
from slingshot.errors import ProviderAuthError, ProviderRequestError
from slingshot.main import app
from slingshot.models import Credential, ProviderToken
from slingshot.reporting.dates import is_absolute_date
from slingshot.settings import get_settings

RAW_HEADERS = {"Authorization": "Bearer ya29.raw-token"}
SITE = "https://example.com/"


@pytest.fixture
def analytics():
    return AsyncMock()


@pytest.fixture
def search_console():
    return AsyncMock()


@pytest.fixture
def analytics_factory(analytics):
    return MagicMock(return_value=analytics)


@pytest.fixture
def search_console_factory(search_console):
    return MagicMock(return_value=search_console)


@pytest.fixture
def client(
    settings, credential_store, analytics_factory, search_console_factory
):
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_credential_store] = lambda: credential_store
    app.dependency_overrides[get_analytics_client_factory] = lambda: analytics_factory
    app.dependency_overrides[get_search_console_client_factory] = (
        lambda: search_console_factory
    )
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


class TestBearerResolution:
    def test_missing_bearer_rejected_before_provider_call(
        self, client, analytics_factory
    ):
        resp = client.get("/api/analytics/google/ga4/properties")

        assert resp.status_code == 401
        assert resp.json()["success"] is False
        analytics_factory.assert_not_called()

    def test_non_bearer_scheme_rejected(self, client, search_console_factory):
        resp = client.get(
            "/api/analytics/google/gsc/sites",
            headers={"Authorization": "Basic dXNlcjpwYXNz"},
        )

        assert resp.status_code == 401
        search_console_factory.assert_not_called()

    def test_raw_google_token_forwarded(self, client, analytics, analytics_factory):
        analytics.list_accounts.return_value = []

        client.get(
            "/api/analytics/google/ga4/accounts",
            headers={**RAW_HEADERS, "x-refresh-token": "1//refresh"},
        )

        analytics_factory.assert_called_once_with(
            ProviderToken(access_token="ya29.raw-token", refresh_token="1//refresh")
        )

    def test_session_token_uses_stored_credentials(
        self, client, credential_store, analytics, analytics_factory, make_session_token
    ):
        analytics.list_accounts.return_value = []
        credential_store.data[("user-1", "google")] = Credential(
            user_id="user-1",
            access_token="ya29.stored",
            refresh_token="1//stored",
            expires_at=datetime.now(UTC) + timedelta(hours=1),
        )

        resp = client.get(
            "/api/analytics/google/ga4/accounts",
            headers={"Authorization": f"Bearer {make_session_token(sub='user-1')}"},
        )

        assert resp.status_code == 200
        analytics_factory.assert_called_once_with(
            ProviderToken(
                access_token="ya29.stored", refresh_token="1//stored", user_id="user-1"
            )
        )

    def test_session_without_stored_credentials(
        self, client, analytics_factory, make_session_token
    ):
        resp = client.get(
            "/api/analytics/google/ga4/accounts",
            headers={"Authorization": f"Bearer {make_session_token(sub='nobody')}"},
        )

        assert resp.status_code == 404
        analytics_factory.assert_not_called()

    def test_expired_session(self, client, analytics_factory, make_session_token):
        resp = client.get(
            "/api/analytics/google/ga4/accounts",
            headers={"Authorization": f"Bearer {make_session_token(expires_in=-5)}"},
        )

        assert resp.status_code == 401
        analytics_factory.assert_not_called()


class TestGa4Routes:
    def test_properties_success_envelope(self, client, analytics):
        analytics.list_properties.return_value = [
            {"name": "properties/1", "displayName": "Blog", "parent": "accounts/9"}
        ]

        resp = client.get(
            "/api/analytics/google/ga4/properties",
            params={"accountId": "accounts/9"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 200
        assert resp.json() == {
            "success": True,
            "data": [
                {"name": "properties/1", "displayName": "Blog", "parent": "accounts/9"}
            ],
        }
        analytics.list_properties.assert_awaited_once_with("accounts/9")

    def test_provider_auth_error_maps_to_401(self, client, analytics):
        details = {"code": 401, "status": "UNAUTHENTICATED"}
        analytics.list_properties.side_effect = ProviderAuthError(
            "Google rejected the access token", details=details
        )

        resp = client.get("/api/analytics/google/ga4/properties", headers=RAW_HEADERS)

        assert resp.status_code == 401
        assert resp.json() == {
            "success": False,
            "error": "Failed to fetch GA4 properties",
            "details": details,
        }

    def test_provider_error_maps_to_500_with_details(self, client, analytics):
        details = {"code": 429, "message": "Quota exceeded"}
        analytics.get_report.side_effect = ProviderRequestError(
            "Google API request failed with status 429", details=details
        )

        resp = client.get(
            "/api/analytics/google/ga4/report/123", headers=RAW_HEADERS
        )

        assert resp.status_code == 500
        assert resp.json()["error"] == "Failed to fetch analytics report"
        assert resp.json()["details"] == details

    def test_report_passes_dates_through(self, client, analytics):
        analytics.get_report.return_value = {"rows": []}

        resp = client.get(
            "/api/analytics/google/ga4/report/123",
            params={"startDate": "7daysAgo", "endDate": "2024-01-31"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 200
        analytics.get_report.assert_awaited_once_with("123", "7daysAgo", "2024-01-31")

    def test_invalid_date_rejected(self, client, analytics):
        resp = client.get(
            "/api/analytics/google/ga4/top-pages/123",
            params={"startDate": "last-week"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 400
        analytics.get_top_pages.assert_not_called()

    @pytest.mark.parametrize("route", ["report", "top-pages", "traffic", "dashboard"])
    def test_start_after_end_rejected(self, client, analytics, route):
        resp = client.get(
            f"/api/analytics/google/ga4/{route}/123",
            params={"startDate": "2024-03-31", "endDate": "2024-03-01"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 400
        assert resp.json()["success"] is False
        assert "after end date" in resp.json()["error"]
        analytics.get_report.assert_not_called()
        analytics.get_top_pages.assert_not_called()

    def test_realtime(self, client, analytics):
        analytics.get_realtime_report.return_value = {"rows": [], "rowCount": 0}

        resp = client.get(
            "/api/analytics/google/ga4/realtime/123", headers=RAW_HEADERS
        )

        assert resp.json()["data"] == {"rows": [], "rowCount": 0}

    def test_dashboard_compares_with_previous_period(self, client, analytics):
        def report(sessions, users, views):
            return {
                "rows": [{"metricValues": [{"value": "0"}] * 6}],
                "totals": [
                    {
                        "metricValues": [
                            {"value": str(v)}
                            for v in (sessions, users, views, "0.5", "125", "0")
                        ]
                    }
                ],
            }

        analytics.get_report.side_effect = [report(200, 120, 1500), report(100, 100, 1000)]

        resp = client.get(
            "/api/analytics/google/ga4/dashboard/123",
            params={"startDate": "2024-03-01", "endDate": "2024-03-31"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["totals"] == {
            "pageViews": 1500,
            "users": 120,
            "sessions": 200,
            "bounceRate": 50,
            "averageSessionDuration": 125,
        }
        assert data["changes"]["sessions"] == 100.0
        assert data["formatted"]["averageSessionDuration"] == "2m 5s"
        calls = analytics.get_report.await_args_list
        assert calls[0].args == ("123", "2024-03-01", "2024-03-31")
        assert calls[1].args == ("123", "2024-01-30", "2024-02-29")

    def test_dashboard_without_comparison(self, client, analytics):
        analytics.get_report.return_value = {"rows": []}

        resp = client.get(
            "/api/analytics/google/ga4/dashboard/123",
            params={"compare": "false"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["totals"]["pageViews"] == 0
        assert analytics.get_report.await_count == 1
        args = analytics.get_report.await_args.args
        assert is_absolute_date(args[1]) and is_absolute_date(args[2])

    def test_traffic_series(self, client, analytics):
        analytics.get_report.return_value = {
            "rows": [
                {
                    "dimensionValues": [{"value": "20240101"}],
                    "metricValues": [{"value": v} for v in ("5", "4", "9")],
                }
            ]
        }

        resp = client.get("/api/analytics/google/ga4/traffic/123", headers=RAW_HEADERS)

        assert resp.json()["data"] == [
            {"date": "2024-01-01", "pageViews": 9, "users": 4, "sessions": 5}
        ]


class TestSearchConsoleRoutes:
    def test_missing_site_url(self, client, search_console):
        resp = client.get("/api/analytics/google/gsc/top-queries", headers=RAW_HEADERS)

        assert resp.status_code == 400
        assert resp.json() == {"success": False, "error": "Site URL is required"}
        search_console.get_top_queries.assert_not_called()

    def test_missing_bearer_checked_before_site_url(self, client, search_console_factory):
        resp = client.get("/api/analytics/google/gsc/top-queries")

        assert resp.status_code == 401
        search_console_factory.assert_not_called()

    def test_relative_dates_resolved(self, client, search_console):
        search_console.get_top_queries.return_value = {"rows": []}

        resp = client.get(
            "/api/analytics/google/gsc/top-queries",
            params={"siteUrl": SITE, "startDate": "30daysAgo"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 200
        site, start, end = search_console.get_top_queries.await_args.args
        assert site == SITE
        assert is_absolute_date(start)
        assert is_absolute_date(end)
        assert start < end

    def test_start_after_end_rejected(self, client, search_console):
        resp = client.get(
            "/api/analytics/google/gsc/summary",
            params={"siteUrl": SITE, "startDate": "today", "endDate": "7daysAgo"},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 400
        search_console.get_search_analytics.assert_not_called()

    def test_search_analytics_dimensions(self, client, search_console):
        search_console.get_search_analytics.return_value = {"rows": []}

        client.get(
            "/api/analytics/google/gsc/search-analytics",
            params={
                "siteUrl": SITE,
                "startDate": "2024-01-01",
                "endDate": "2024-01-31",
                "dimensions": "query, page",
            },
            headers=RAW_HEADERS,
        )

        search_console.get_search_analytics.assert_awaited_once_with(
            SITE, "2024-01-01", "2024-01-31", ["query", "page"]
        )

    def test_provider_error_details(self, client, search_console):
        details = {"code": 403, "message": "User does not have sufficient permission"}
        search_console.get_sitemaps.side_effect = ProviderRequestError(
            "Google API request failed with status 403", details=details
        )

        resp = client.get(
            "/api/analytics/google/gsc/sitemaps",
            params={"siteUrl": SITE},
            headers=RAW_HEADERS,
        )

        assert resp.status_code == 500
        assert resp.json() == {
            "success": False,
            "error": "Failed to fetch sitemaps",
            "details": details,
        }

    def test_sites(self, client, search_console):
        search_console.get_sites.return_value = [{"siteUrl": SITE}]

        resp = client.get("/api/analytics/google/gsc/sites", headers=RAW_HEADERS)

        assert resp.json() == {"success": True, "data": [{"siteUrl": SITE}]}

    def test_timeseries_raw_and_normalized(self, client, search_console):
        raw = {
            "rows": [
                {
                    "keys": ["2024-01-01"],
                    "clicks": 3,
                    "impressions": 30,
                    "ctr": 0.1,
                    "position": 4.2,
                }
            ]
        }
        search_console.get_search_analytics_by_date.return_value = raw
        params = {"siteUrl": SITE, "startDate": "2024-01-01", "endDate": "2024-01-31"}

        resp = client.get(
            "/api/analytics/google/gsc/timeseries", params=params, headers=RAW_HEADERS
        )
        assert resp.json()["data"] == raw

        resp = client.get(
            "/api/analytics/google/gsc/timeseries",
            params={**params, "normalized": "true"},
            headers=RAW_HEADERS,
        )
        assert resp.json()["data"] == [
            {
                "date": "2024-01-01",
                "clicks": 3,
                "impressions": 30,
                "ctr": 0.1,
                "position": 4.2,
            }
        ]

    def test_summary(self, client, search_console):
        search_console.get_search_analytics.return_value = {
            "rows": [
                {"clicks": 10, "impressions": 100, "ctr": 0.1, "position": 3},
                {"clicks": 20, "impressions": 200, "ctr": 0.2, "position": 5},
            ]
        }

        resp = client.get(
            "/api/analytics/google/gsc/summary",
            params={"siteUrl": SITE},
            headers=RAW_HEADERS,
        )

        assert resp.json()["data"] == {
            "clicks": 30,
            "impressions": 300,
            "ctr": 15.0,
            "position": 4.0,
        }

    def test_countries_and_pages(self, client, search_console):
        search_console.get_country_data.return_value = {"rows": []}
        search_console.get_top_pages.return_value = {"rows": []}
        params = {"siteUrl": SITE}

        assert (
            client.get(
                "/api/analytics/google/gsc/countries", params=params, headers=RAW_HEADERS
            ).status_code
            == 200
        )
        assert (
            client.get(
                "/api/analytics/google/gsc/top-pages", params=params, headers=RAW_HEADERS
            ).status_code
            == 200
        )
        search_console.get_country_data.assert_awaited_once()
        search_console.get_top_pages.assert_awaited_once()
