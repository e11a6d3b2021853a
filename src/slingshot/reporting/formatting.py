"""Presentation helpers for dashboard numbers."""

from numbers import Real


def _require_number(value: object, name: str) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise TypeError(f"{name} must be a number, got {type(value).__name__}")
    return float(value)


def format_number(num: float) -> str:
    """Abbreviate large numbers: ``1500 -> "1.5K"``, ``2500000 -> "2.5M"``."""
    value = _require_number(num, "num")
    if value >= 1_000_000:
        return f"{value / 1_000_000:.1f}M"
    if value >= 1_000:
        return f"{value / 1_000:.1f}K"
    if value.is_integer():
        return f"{int(value):,}"
    return f"{value:,}"


def format_duration(seconds: float) -> str:
    """Render seconds as ``"<minutes>m <seconds>s"``."""
    value = _require_number(seconds, "seconds")
    if value < 0:
        raise ValueError("seconds must not be negative")
    total = int(round(value))
    minutes, remaining = divmod(total, 60)
    return f"{minutes}m {remaining}s"


def format_percentage_change(change: float) -> str:
    """Signed percentage change, e.g. ``"+5.0% from last month"``."""
    value = _require_number(change, "change")
    sign = "+" if value >= 0 else ""
    return f"{sign}{value:.1f}% from last month"


def percentage_change(current: float, previous: float) -> float:
    """Relative change from ``previous`` to ``current`` in percent."""
    current = _require_number(current, "current")
    previous = _require_number(previous, "previous")
    if previous == 0:
        return 0.0
    return (current - previous) / previous * 100
