"""
Date and duration utilities for deadlines and time tracking.
All calendar comparisons use the local date of the machine running the client.
"""

import math
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional, Union

from housing_portal.core.utils import parse_date_maybe


DateLike = Union[str, date, datetime, None]

SECONDS_PER_HOUR = 3600


def today() -> date:
    """
    Get the current local date.

    Returns:
        date: Today's date
    """
    return date.today()


def today_iso() -> str:
    """Today's date as YYYY-MM-DD, the default for new time entries."""
    return today().isoformat()


def seconds_to_hours(seconds: int) -> float:
    """
    Convert elapsed seconds to hours rounded half-up to two decimals.

    Examples:
        90 → 0.03  (0.025 rounds up)
        3600 → 1.0
    """
    hours = Decimal(int(seconds)) / Decimal(SECONDS_PER_HOUR)
    return float(hours.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def format_elapsed(seconds: int) -> str:
    """Format elapsed seconds as zero-padded HH:MM:SS (hours do not wrap)."""
    seconds = max(int(seconds), 0)
    hours, rem = divmod(seconds, SECONDS_PER_HOUR)
    minutes, secs = divmod(rem, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def _as_date(value: DateLike) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    parsed = parse_date_maybe(value)
    return parsed.date() if parsed else None


def days_until(deadline: DateLike, reference: Optional[date] = None) -> Optional[int]:
    """
    Whole days from the reference date (default today) to a deadline.

    Partial days round up, so a deadline later today counts as 0 and
    tomorrow as 1. Past deadlines are negative.

    Args:
        deadline: ISO date string, date or datetime
        reference: Date to count from

    Returns:
        int or None if the deadline cannot be parsed
    """
    if isinstance(deadline, datetime):
        now = datetime.combine(reference or today(), datetime.min.time())
        delta = deadline.replace(tzinfo=None) - now
        return math.ceil(delta.total_seconds() / 86400)

    target = _as_date(deadline)
    if target is None:
        return None
    return (target - (reference or today())).days


def deadline_label(days: Optional[int]) -> Optional[str]:
    """
    Human label for days remaining; None for past or unknown deadlines.
    """
    if days is None or days < 0:
        return None
    if days == 0:
        return "Due today"
    if days == 1:
        return "1 day left"
    return f"{days} days left"


def within_last_days(value: DateLike, days: int, reference: Optional[date] = None) -> bool:
    """True if the date falls within the last `days` days (inclusive)."""
    target = _as_date(value)
    if target is None:
        return False
    cutoff = (reference or today()) - timedelta(days=days)
    return target >= cutoff
