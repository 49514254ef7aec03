"""
FoodHub Admin - Shared Helpers
===============================
Pure utility functions with NO database or module dependencies.
"""

from datetime import datetime, timezone
from typing import Optional


def now_utc() -> datetime:
    """Returns current UTC datetime (timezone-aware)."""
    return datetime.now(timezone.utc)


def safe_float(value) -> float:
    """Safely convert a value to float. Returns 0.0 on failure."""
    if value is None or value == "":
        return 0.0
    try:
        return float(value)
    except (ValueError, TypeError):
        return 0.0


# ==========================================
# Date parsing / formatting
# ==========================================

# Human-readable formats produced by the storefront ("Jan 5, 2025", ...)
_HUMAN_DATE_FORMATS = (
    "%b %d, %Y",
    "%B %d, %Y",
    "%Y-%m-%d",
    "%m/%d/%Y",
    "%d %b %Y",
)


def parse_datetime(value) -> Optional[datetime]:
    """Parse an ISO-8601 timestamp or a human-readable date. Returns None when unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    text = str(value).strip()
    if not text:
        return None

    try:
        # fromisoformat() only accepts a trailing "Z" from 3.11 on
        return datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        pass

    for fmt in _HUMAN_DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    return None


def weekday_sunday_first(value: datetime) -> int:
    """Weekday index with Sunday = 0 ... Saturday = 6."""
    return (value.weekday() + 1) % 7


def format_display_date(value: Optional[datetime]) -> Optional[str]:
    """'Jan 5, 2025' style date used by the order list."""
    if value is None:
        return None
    return f"{value.strftime('%b')} {value.day}, {value.year}"


def format_display_time(value: Optional[datetime]) -> Optional[str]:
    """'07:30 PM' style time used by the order list."""
    if value is None:
        return None
    return value.strftime("%I:%M %p")
