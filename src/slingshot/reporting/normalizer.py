"""
Normalization of provider report payloads into display records.

GA4 and Search Console return very different row layouts. The functions
here map both onto the small set of models in :mod:`slingshot.models.reports`.
Missing data is never an error: empty reports produce zeroed records or
empty series.
"""

from typing import Any

from slingshot.models import (
    DashboardTotals,
    SearchConsolePoint,
    SearchConsoleTotals,
    TrafficPoint,
)


# Metric positions in AnalyticsClient.get_report responses
SESSIONS, USERS, PAGE_VIEWS, BOUNCE_RATE, AVG_SESSION_DURATION = range(5)


def _metric_values(row: dict[str, Any]) -> list[Any]:
    if "metricValues" in row:
        return [item.get("value") for item in row.get("metricValues") or []]
    # Legacy flattened shape: {"metrics": [{"values": [...]}]}
    metrics = row.get("metrics") or [{}]
    return list(metrics[0].get("values") or [])


def _dimension_values(row: dict[str, Any]) -> list[Any]:
    if "dimensionValues" in row:
        return [item.get("value") for item in row.get("dimensionValues") or []]
    return list(row.get("dimensions") or row.get("keys") or [])


def _number(values: list[Any], index: int) -> float:
    try:
        return float(values[index])
    except (IndexError, TypeError, ValueError):
        return 0.0


def _format_ga4_date(value: str) -> str:
    # GA4 reports the date dimension as YYYYMMDD
    if len(value) == 8 and value.isdigit():
        return f"{value[:4]}-{value[4:6]}-{value[6:]}"
    return value


def normalize_totals(result: dict[str, Any] | None) -> DashboardTotals:
    """
    Headline totals from a GA4 ``get_report`` response.

    Reads ``totals[0]`` when GA4 returned one, otherwise the first row.
    Returns an all-zero record when there are no rows.
    """
    if not result or not result.get("rows"):
        return DashboardTotals()

    totals = result.get("totals") or []
    source = totals[0] if totals else result["rows"][0]
    values = _metric_values(source)
    return DashboardTotals(
        sessions=int(_number(values, SESSIONS)),
        users=int(_number(values, USERS)),
        page_views=int(_number(values, PAGE_VIEWS)),
        bounce_rate=round(_number(values, BOUNCE_RATE) * 100),
        average_session_duration=round(_number(values, AVG_SESSION_DURATION)),
    )


def normalize_time_series(result: dict[str, Any] | None) -> list[TrafficPoint]:
    """One point per GA4 row, keyed by the first dimension, in provider order."""
    if not result or not result.get("rows"):
        return []

    points = []
    for row in result["rows"]:
        dimensions = _dimension_values(row)
        values = _metric_values(row)
        points.append(
            TrafficPoint(
                date=_format_ga4_date(str(dimensions[0])) if dimensions else "Unknown",
                sessions=int(_number(values, SESSIONS)),
                users=int(_number(values, USERS)),
                page_views=int(_number(values, PAGE_VIEWS)),
            )
        )
    return points


def normalize_search_console_aggregate(
    result: dict[str, Any] | None, weighted: bool = False
) -> SearchConsoleTotals:
    """
    Aggregate Search Analytics rows.

    Clicks and impressions are summed. By default CTR and position are the
    unweighted mean across rows, which overweights small rows. With
    ``weighted=True`` CTR is ``clicks / impressions`` and position is
    weighted by impressions.

    CTR is reported as a percentage rounded to 2 decimals and position is
    rounded to 1 decimal.
    """
    rows = (result or {}).get("rows") or []
    if not rows:
        return SearchConsoleTotals()

    clicks = sum(float(row.get("clicks") or 0) for row in rows)
    impressions = sum(float(row.get("impressions") or 0) for row in rows)

    if weighted:
        ctr = clicks / impressions if impressions else 0.0
        position = (
            sum(
                float(row.get("position") or 0) * float(row.get("impressions") or 0)
                for row in rows
            )
            / impressions
            if impressions
            else 0.0
        )
    else:
        ctr = sum(float(row.get("ctr") or 0) for row in rows) / len(rows)
        position = sum(float(row.get("position") or 0) for row in rows) / len(rows)

    return SearchConsoleTotals(
        clicks=int(clicks),
        impressions=int(impressions),
        ctr=round(ctr * 100, 2),
        position=round(position, 1),
    )


def normalize_search_console_series(
    result: dict[str, Any] | None,
) -> list[SearchConsolePoint]:
    """Date-keyed Search Analytics rows, in provider order."""
    rows = (result or {}).get("rows") or []
    points = []
    for row in rows:
        keys = row.get("keys") or []
        points.append(
            SearchConsolePoint(
                date=str(keys[0]) if keys else "Unknown",
                clicks=int(row.get("clicks") or 0),
                impressions=int(row.get("impressions") or 0),
                ctr=float(row.get("ctr") or 0),
                position=float(row.get("position") or 0),
            )
        )
    return points
