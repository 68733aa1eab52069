"""Display formatting for metrics values and chart axes."""

import pandas as pd

from analytics.periods import Frequency, parse_date, to_frequency

HIDDEN = "****"


def _missing(val) -> bool:
    try:
        return val is None or bool(pd.isna(val))
    except (TypeError, ValueError):
        return True


def format_decimal(val) -> str:
    """Two decimals; missing / NaN renders as ``0.00``."""
    if _missing(val):
        return "0.00"
    return f"{float(val):.2f}"


def format_currency(val, hide_amounts: bool = False) -> str:
    """Whole currency units with thousands separators, e.g. ``-$1,250``."""
    if hide_amounts:
        return HIDDEN
    if _missing(val):
        return "$0"
    amount = round(float(val))
    sign = "-" if amount < 0 else ""
    return f"{sign}${abs(amount):,}"


def format_pnl_k(val, hide_amounts: bool = False) -> str:
    """Compact PnL: full amount below 10,000, ``+12.3K`` style above."""
    if hide_amounts:
        return HIDDEN
    if _missing(val):
        return "$0"
    val = float(val)
    if abs(val) < 10000:
        return format_currency(val)
    return f"{'+' if val >= 0 else ''}{val / 1000:.1f}K"


def format_axis_date(value, frequency) -> str:
    """
    Chart axis tick for a period start.

    yearly ``2024``, quarterly ``24Q2``, monthly ``24/05``, weekly and
    daily ``05/13``.  Unparseable dates render as an empty string.
    """
    d = parse_date(value)
    if d is None:
        return ""

    freq = to_frequency(frequency)
    yy = f"{d.year % 100:02d}"
    if freq is Frequency.YEARLY:
        return str(d.year)
    if freq is Frequency.QUARTERLY:
        return f"{yy}Q{(d.month - 1) // 3 + 1}"
    if freq is Frequency.MONTHLY:
        return f"{yy}/{d.month:02d}"
    return f"{d.month:02d}/{d.day:02d}"
