"""Dashboard cards assembled from normalized GA4 totals."""

from datetime import date, timedelta
from typing import Any

from slingshot.errors import ValidationError
from slingshot.models import DashboardTotals

from .formatting import (
    format_duration,
    format_number,
    format_percentage_change,
    percentage_change,
)

COMPARED_FIELDS = ("page_views", "users", "sessions", "bounce_rate")


def previous_period(start_date: str, end_date: str) -> tuple[str, str]:
    """The equally long range ending the day before ``start_date``."""
    start = date.fromisoformat(start_date)
    end = date.fromisoformat(end_date)
    if start > end:
        raise ValidationError(
            f"Start date '{start_date}' is after end date '{end_date}'"
        )
    length = (end - start).days + 1
    prev_end = start - timedelta(days=1)
    prev_start = prev_end - timedelta(days=length - 1)
    return prev_start.isoformat(), prev_end.isoformat()


def build_dashboard(
    current: DashboardTotals, previous: DashboardTotals | None = None
) -> dict[str, Any]:
    """Totals, period-over-period changes and display strings."""
    changes = {}
    for field in COMPARED_FIELDS:
        alias = DashboardTotals.model_fields[field].alias or field
        changes[alias] = (
            round(
                percentage_change(getattr(current, field), getattr(previous, field)),
                1,
            )
            if previous is not None
            else 0.0
        )

    formatted = {
        "pageViews": format_number(current.page_views),
        "users": format_number(current.users),
        "sessions": format_number(current.sessions),
        "bounceRate": f"{current.bounce_rate}%",
        "averageSessionDuration": format_duration(current.average_session_duration),
    }
    for name, value in changes.items():
        formatted[f"{name}Change"] = format_percentage_change(value)

    return {
        "totals": current.to_response(),
        "changes": changes,
        "formatted": formatted,
    }
