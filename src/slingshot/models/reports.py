"""Report query and normalized report models."""

from typing import Any

from pydantic import Field

from .base import BaseSlingshotModel


class ReportQuery(BaseSlingshotModel):
    """Parameters of a single provider report request."""

    start_date: str = Field(description="Absolute date or relative keyword")
    end_date: str = Field(description="Absolute date or relative keyword")
    dimensions: list[str] = Field(default_factory=list)
    metrics: list[str] = Field(default_factory=list)
    row_limit: int | None = Field(default=None, ge=1)
    order_by: str | None = Field(
        default=None, description="Metric to order by, descending"
    )
    order_by_dimension: str | None = Field(
        default=None, description="Dimension to order by, ascending"
    )
    keep_empty_rows: bool = Field(default=False)
    with_totals: bool = Field(default=False)

    def to_ga4_body(self) -> dict[str, Any]:
        """Render as a GA4 ``runReport`` request body."""
        body: dict[str, Any] = {
            "dateRanges": [{"startDate": self.start_date, "endDate": self.end_date}],
            "metrics": [{"name": name} for name in self.metrics],
            "dimensions": [{"name": name} for name in self.dimensions],
        }
        if self.keep_empty_rows:
            body["keepEmptyRows"] = True
        if self.with_totals:
            body["metricAggregations"] = ["TOTAL"]
        order_bys = []
        if self.order_by:
            order_bys.append({"metric": {"metricName": self.order_by}, "desc": True})
        if self.order_by_dimension:
            order_bys.append({"dimension": {"dimensionName": self.order_by_dimension}})
        if order_bys:
            body["orderBys"] = order_bys
        if self.row_limit:
            body["limit"] = self.row_limit
        return body

    def to_search_console_body(self) -> dict[str, Any]:
        """Render as a Search Analytics ``query`` request body."""
        body: dict[str, Any] = {
            "startDate": self.start_date,
            "endDate": self.end_date,
            "dimensions": list(self.dimensions),
            "startRow": 0,
        }
        if self.row_limit:
            body["rowLimit"] = self.row_limit
        return body


class DashboardTotals(BaseSlingshotModel):
    """Headline traffic numbers for a GA4 property."""

    page_views: int = Field(default=0, alias="pageViews")
    users: int = 0
    sessions: int = 0
    bounce_rate: int = Field(default=0, alias="bounceRate")
    average_session_duration: int = Field(default=0, alias="averageSessionDuration")


class TrafficPoint(BaseSlingshotModel):
    """One day of GA4 traffic."""

    date: str
    page_views: int = Field(default=0, alias="pageViews")
    users: int = 0
    sessions: int = 0


class SearchConsoleTotals(BaseSlingshotModel):
    """Aggregate organic search performance."""

    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0


class SearchConsolePoint(BaseSlingshotModel):
    """One row of a date-dimensioned Search Analytics response."""

    date: str
    clicks: int = 0
    impressions: int = 0
    ctr: float = 0.0
    position: float = 0.0
