"""Utility functions for liqwatch."""
import math
from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP
from typing import Optional

_CENTS = Decimal("0.01")


def _to_decimal(value: float) -> Decimal:
    # str() gives the shortest repr, so 999.995 stays 999.995 and rounds up
    return Decimal(str(value))


def format_full(value: float) -> str:
    """Format with thousands separators and two fraction digits (half-up)."""
    rounded = _to_decimal(value).quantize(_CENTS, rounding=ROUND_HALF_UP)
    return f"{rounded:,.2f}"


def format_compact(value: float) -> str:
    """Compact magnitude form: 2.34M, 15K, or the full format below 1,000.

    Millions and thousands are truncated, never rounded.
    """
    if value >= 1_000_000:
        millions = (_to_decimal(value) / 1_000_000).quantize(_CENTS, rounding=ROUND_DOWN)
        return f"{float(millions)}M"
    if value >= 1_000:
        return f"{math.floor(value / 1_000)}K"
    return format_full(value)


def format_plain(value: float) -> str:
    """Format for display: grouped, up to three fraction digits."""
    text = f"{value:,.3f}".rstrip("0").rstrip(".")
    return text or "0"


def parse_number(raw) -> Optional[float]:
    """Parse a form value as a finite float, or None if it isn't one."""
    if raw is None:
        return None
    try:
        value = float(str(raw).strip())
    except ValueError:
        return None
    if not math.isfinite(value):
        return None
    return value
