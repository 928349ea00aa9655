"""
Money formatting and form coercion utilities for USD amounts.

Handles various inputs:
- 1250000 → "$1,250,000"
- "1,500.50" → 1500.5 (form text to number)
- "" → None (blank form field)

Formatted strings are for display only and are never parsed back.
"""

import math
import re
from decimal import Decimal, ROUND_HALF_UP, InvalidOperation
from typing import Iterable, Optional, Union


Number = Union[int, float]

_THOUSANDS_RE = re.compile(r"(?<=\d),(?=\d{3}\b)")


def format_usd(amount: Optional[Number], decimals: int = 0) -> str:
    """
    Format an amount as en-US dollars.

    Examples:
        1_250_000 → "$1,250,000"
        1234.5 (decimals=2) → "$1,234.50"
        None → "$0"
        -5000 → "-$5,000"

    Args:
        amount: Amount in dollars
        decimals: Fraction digits to show

    Returns:
        Formatted string
    """
    value = _to_decimal(amount or 0)
    quantum = Decimal(1).scaleb(-decimals)
    value = value.quantize(quantum, rounding=ROUND_HALF_UP)

    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.{decimals}f}"


def coerce_float(text: Union[str, Number, None]) -> Optional[float]:
    """
    Convert form text to a float.

    Examples:
        "1500" → 1500.0
        "1,500.50" → 1500.5
        "" → None
        "abc" → None
    """
    if text is None or isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        return float(text)

    cleaned = _THOUSANDS_RE.sub("", str(text).strip()).lstrip("$")
    if not cleaned:
        return None

    try:
        value = float(cleaned)
    except ValueError:
        return None
    return value if math.isfinite(value) else None


def coerce_int(text: Union[str, Number, None]) -> Optional[int]:
    """
    Convert form text to an int.

    Whole-valued decimals ("12.0") are accepted; fractional values are not.
    """
    value = coerce_float(text)
    if value is None or value != int(value):
        return None
    return int(value)


def percent(part: Optional[Number], whole: Optional[Number]) -> int:
    """
    Integer percentage rounded half-up; 0 when whole is not positive.

    Used for funding progress bars and distribution widths.
    """
    if not whole or whole <= 0:
        return 0
    ratio = _to_decimal(part or 0) / _to_decimal(whole) * 100
    return int(ratio.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def safe_sum(values: Iterable[Optional[Number]]) -> Number:
    """Sum values, treating None as zero."""
    return sum(v or 0 for v in values)


def _to_decimal(value: Number) -> Decimal:
    try:
        # str() keeps 0.025 exact instead of its binary approximation
        return Decimal(str(value))
    except InvalidOperation:
        return Decimal(0)
