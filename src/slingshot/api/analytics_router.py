"""
FastAPI router proxying Google Analytics 4 and Search Console reports.

Raw routes return provider JSON untouched; the dashboard, traffic and
summary routes return normalized records.
"""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import APIRouter, Depends, Query

from ..errors import ProviderAuthError, ProviderRequestError, ValidationError
from ..models import ProviderToken
from ..reporting import (
    build_dashboard,
    normalize_search_console_aggregate,
    normalize_search_console_series,
    normalize_time_series,
    normalize_totals,
    previous_period,
    resolve_date_param,
    validate_date_range,
)
from ..reporting.dates import DEFAULT_END_DATE, DEFAULT_START_DATE
from .dependencies import (
    AnalyticsClientFactory,
    SearchConsoleClientFactory,
    get_analytics_client_factory,
    get_provider_token,
    get_search_console_client_factory,
)
from .responses import success

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/analytics/google", tags=["analytics"])


@contextmanager
def provider_errors(action: str) -> Iterator[None]:
    """Re-raise provider failures as ``Failed to fetch <action>``."""
    try:
        yield
    except (ProviderAuthError, ProviderRequestError) as e:
        logger.error(f"[analytics] {action} error: {e.details}")
        raise type(e)(f"Failed to fetch {action}", details=e.details) from e


def _require_site_url(site_url: str | None) -> str:
    if not site_url or not site_url.strip():
        raise ValidationError("Site URL is required")
    return site_url.strip()


def _absolute_dates(start_date: str | None, end_date: str | None) -> tuple[str, str]:
    start = resolve_date_param(start_date, DEFAULT_START_DATE)
    end = resolve_date_param(end_date, DEFAULT_END_DATE)
    validate_date_range(start, end)
    return start, end


# Google Analytics routes


@router.get("/ga4/accounts")
async def ga4_accounts(
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    with provider_errors("GA4 accounts"):
        return success(await analytics(token).list_accounts())


@router.get("/ga4/properties")
async def ga4_properties(
    account_id: str | None = Query(None, alias="accountId"),
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    with provider_errors("GA4 properties"):
        return success(await analytics(token).list_properties(account_id))


@router.get("/ga4/realtime/{property_id}")
async def ga4_realtime(
    property_id: str,
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    with provider_errors("realtime data"):
        return success(await analytics(token).get_realtime_report(property_id))


@router.get("/ga4/report/{property_id}")
async def ga4_report(
    property_id: str,
    start_date: str = Query(DEFAULT_START_DATE, alias="startDate"),
    end_date: str = Query(DEFAULT_END_DATE, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    validate_date_range(start_date, end_date)
    with provider_errors("analytics report"):
        data = await analytics(token).get_report(property_id, start_date, end_date)
    return success(data)


@router.get("/ga4/top-pages/{property_id}")
async def ga4_top_pages(
    property_id: str,
    start_date: str = Query(DEFAULT_START_DATE, alias="startDate"),
    end_date: str = Query(DEFAULT_END_DATE, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    validate_date_range(start_date, end_date)
    with provider_errors("top pages"):
        data = await analytics(token).get_top_pages(property_id, start_date, end_date)
    return success(data)


@router.get("/ga4/dashboard/{property_id}")
async def ga4_dashboard(
    property_id: str,
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    compare: bool = Query(True),
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    """Headline totals, with changes against the preceding period."""
    start, end = _absolute_dates(start_date, end_date)
    client = analytics(token)
    with provider_errors("analytics report"):
        current = normalize_totals(await client.get_report(property_id, start, end))
        previous = None
        if compare:
            prev_start, prev_end = previous_period(start, end)
            previous = normalize_totals(
                await client.get_report(property_id, prev_start, prev_end)
            )
    return success(build_dashboard(current, previous))


@router.get("/ga4/traffic/{property_id}")
async def ga4_traffic(
    property_id: str,
    start_date: str = Query(DEFAULT_START_DATE, alias="startDate"),
    end_date: str = Query(DEFAULT_END_DATE, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    analytics: AnalyticsClientFactory = Depends(get_analytics_client_factory),
):
    validate_date_range(start_date, end_date)
    with provider_errors("traffic trends"):
        data = await analytics(token).get_report(property_id, start_date, end_date)
    return success([point.to_response() for point in normalize_time_series(data)])


# Google Search Console routes


@router.get("/gsc/sites")
async def gsc_sites(
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    with provider_errors("Search Console sites"):
        return success(await search_console(token).get_sites())


@router.get("/gsc/search-analytics")
async def gsc_search_analytics(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    dimensions: str | None = Query(None, description="Comma separated"),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    dims = [d.strip() for d in (dimensions or "").split(",") if d.strip()] or None
    with provider_errors("search analytics"):
        data = await search_console(token).get_search_analytics(
            site_url, start, end, dims
        )
    return success(data)


@router.get("/gsc/top-queries")
async def gsc_top_queries(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    with provider_errors("top queries"):
        data = await search_console(token).get_top_queries(site_url, start, end)
    return success(data)


@router.get("/gsc/top-pages")
async def gsc_top_pages(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    with provider_errors("top pages"):
        data = await search_console(token).get_top_pages(site_url, start, end)
    return success(data)


@router.get("/gsc/timeseries")
async def gsc_timeseries(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    normalized: bool = Query(False),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    with provider_errors("search analytics timeseries"):
        data = await search_console(token).get_search_analytics_by_date(
            site_url, start, end
        )
    if normalized:
        return success(
            [point.to_response() for point in normalize_search_console_series(data)]
        )
    return success(data)


@router.get("/gsc/countries")
async def gsc_countries(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    with provider_errors("country data"):
        data = await search_console(token).get_country_data(site_url, start, end)
    return success(data)


@router.get("/gsc/sitemaps")
async def gsc_sitemaps(
    site_url: str | None = Query(None, alias="siteUrl"),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    site_url = _require_site_url(site_url)
    with provider_errors("sitemaps"):
        return success(await search_console(token).get_sitemaps(site_url))


@router.get("/gsc/summary")
async def gsc_summary(
    site_url: str | None = Query(None, alias="siteUrl"),
    start_date: str | None = Query(None, alias="startDate"),
    end_date: str | None = Query(None, alias="endDate"),
    weighted: bool = Query(False),
    token: ProviderToken = Depends(get_provider_token),
    search_console: SearchConsoleClientFactory = Depends(
        get_search_console_client_factory
    ),
):
    """Clicks, impressions, CTR and position across the top queries."""
    site_url = _require_site_url(site_url)
    start, end = _absolute_dates(start_date, end_date)
    with provider_errors("search analytics"):
        data = await search_console(token).get_search_analytics(site_url, start, end)
    totals = normalize_search_console_aggregate(data, weighted=weighted)
    return success(totals.to_response())
