"""Date parameter handling for report queries."""

import re
from datetime import UTC, date, datetime, timedelta

from slingshot.errors import ValidationError

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

# Relative keywords understood by GA4, mapped to days before today
RELATIVE_DATE_OFFSETS = {
    "today": 0,
    "yesterday": 1,
    "7daysAgo": 7,
    "28daysAgo": 28,
    "30daysAgo": 30,
    "90daysAgo": 90,
    "365daysAgo": 365,
}

DEFAULT_START_DATE = "30daysAgo"
DEFAULT_END_DATE = "today"


def is_absolute_date(value: str) -> bool:
    """Return ``True`` for a real calendar date in ``YYYY-MM-DD`` form."""
    if not ISO_DATE_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_date_param(value: str) -> str:
    """Accept an absolute date or a known relative keyword unchanged."""
    if value in RELATIVE_DATE_OFFSETS or is_absolute_date(value):
        return value
    raise ValidationError(
        f"Invalid date '{value}': expected YYYY-MM-DD or one of "
        f"{', '.join(RELATIVE_DATE_OFFSETS)}"
    )


def require_absolute_date(value: str) -> str:
    """Reject anything that is not an absolute ``YYYY-MM-DD`` date."""
    if not is_absolute_date(value):
        raise ValidationError(f"Invalid date '{value}': expected YYYY-MM-DD")
    return value


def resolve_date_param(
    value: str | None, default: str, today: date | None = None
) -> str:
    """
    Resolve a date parameter to an absolute ``YYYY-MM-DD`` string.

    Args:
        value: Raw query parameter; empty falls back to ``default``
        default: Keyword or date used when ``value`` is empty
        today: Reference day (defaults to the current UTC date)

    Raises:
        ValidationError: If the value is neither a keyword nor a valid date
    """
    value = validate_date_param(value or default)
    if value in RELATIVE_DATE_OFFSETS:
        today = today or datetime.now(UTC).date()
        return (today - timedelta(days=RELATIVE_DATE_OFFSETS[value])).isoformat()
    return value


def validate_date_range(
    start_date: str, end_date: str, today: date | None = None
) -> None:
    """
    Reject a range whose start falls after its end.

    Keywords are resolved against ``today`` for the comparison only; callers
    keep passing the original values on.
    """
    start = resolve_date_param(start_date, start_date, today)
    end = resolve_date_param(end_date, end_date, today)
    if start > end:
        raise ValidationError(
            f"Start date '{start_date}' is after end date '{end_date}'"
        )
