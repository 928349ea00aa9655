"""
Shared utility functions for date parsing, search matching and ID generation.
"""

import itertools
from datetime import datetime
from typing import Iterator, Optional
from dateutil import parser as dateparser


def parse_date_maybe(text: Optional[str]) -> Optional[datetime]:
    """
    Attempt to parse a date string, returning None on failure.

    Uses dateutil.parser; the API sends ISO dates (YYYY-MM-DD) but older
    records may carry US-style dates (MM/DD/YYYY).

    Args:
        text: Date string (e.g., "2025-03-15" or "03/15/2025")

    Returns:
        Parsed datetime or None if parsing fails

    Examples:
        >>> parse_date_maybe("2025-03-15")
        datetime.datetime(2025, 3, 15, 0, 0)
        >>> parse_date_maybe("not a date")
        None
    """
    if not text:
        return None
    text = str(text).strip()
    if not text:
        return None

    try:
        return dateparser.parse(text)
    except (ValueError, TypeError, OverflowError):
        return None


def matches_search(term: Optional[str], *values: Optional[str]) -> bool:
    """
    Case-insensitive substring match across several fields.

    An empty term matches everything. The term is used as typed, so
    surrounding spaces are part of the match. None fields are skipped.

    Examples:
        >>> matches_search("mill", "Dallas Mill Station", "Dallas")
        True
        >>> matches_search("", None)
        True
    """
    if not term:
        return True

    needle = term.lower()
    return any(needle in str(v).lower() for v in values if v is not None)


def id_sequence(start: int = 1) -> Iterator[int]:
    """Monotonic ids for transient UI entries (chat messages)."""
    return itertools.count(start)
