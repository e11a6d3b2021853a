"""Report date handling, normalization and formatting."""

from .dashboard import build_dashboard, previous_period
from .dates import (
    require_absolute_date,
    resolve_date_param,
    validate_date_param,
    validate_date_range,
)
from .formatting import (
    format_duration,
    format_number,
    format_percentage_change,
    percentage_change,
)
from .normalizer import (
    normalize_search_console_aggregate,
    normalize_search_console_series,
    normalize_time_series,
    normalize_totals,
)

__all__ = [
    "build_dashboard",
    "format_duration",
    "format_number",
    "format_percentage_change",
    "normalize_search_console_aggregate",
    "normalize_search_console_series",
    "normalize_time_series",
    "normalize_totals",
    "percentage_change",
    "previous_period",
    "require_absolute_date",
    "resolve_date_param",
    "validate_date_param",
    "validate_date_range",
]
