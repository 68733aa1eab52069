"""
Trade selection for the dashboard views.

Narrows the journal to the active portfolios, strategy / emotion tags and
a time range before the metrics core runs, and derives the calendar-view
aggregates (daily PnL map, monthly summary).
"""

import logging
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd
from dateutil.relativedelta import relativedelta

from analytics.models import MonthlyStats, Trade, coerce_pnl
from analytics.periods import parse_date
from shared.constants import DEFAULT_PORTFOLIO_ID

logger = logging.getLogger(__name__)


class TimeRange(str, Enum):
    ALL = "ALL"
    ONE_MONTH = "1M"
    THREE_MONTHS = "3M"
    YTD = "YTD"
    CUSTOM = "CUSTOM"


def to_time_range(value) -> TimeRange:
    if isinstance(value, TimeRange):
        return value
    try:
        return TimeRange(str(value).strip().upper())
    except ValueError:
        raise ValueError(f"Unknown time range: {value!r}") from None


def resolve_time_range(
    time_range,
    today: date,
    custom_start=None,
    custom_end=None,
) -> Tuple[Optional[date], Optional[date]]:
    """
    Translate a time-range choice into inclusive ``(start, end)`` dates.

    1M / 3M reach back that many calendar months from *today*, YTD starts
    on Jan 1, CUSTOM uses the given bounds (end optional).  ALL, or a
    CUSTOM range without a usable start, means no bounds.
    """
    selected = to_time_range(time_range)

    if selected is TimeRange.ONE_MONTH:
        return today - relativedelta(months=1), None
    if selected is TimeRange.THREE_MONTHS:
        return today - relativedelta(months=3), None
    if selected is TimeRange.YTD:
        return date(today.year, 1, 1), None
    if selected is TimeRange.CUSTOM:
        start = parse_date(custom_start)
        if start is None:
            if custom_start:
                logger.warning(f"Ignoring unparseable custom start date {custom_start!r}")
            return None, None
        return start, parse_date(custom_end)
    return None, None


def select_trades(
    trades: Iterable[Trade],
    active_portfolio_ids: Optional[Iterable[str]] = None,
    strategies: Optional[Iterable[str]] = None,
    emotions: Optional[Iterable[str]] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[Trade]:
    """
    Filter trades for the current view.

    Empty / None filters match everything.  When a date bound is set,
    trades with unparseable dates are excluded since they cannot be placed.
    """
    portfolios = set(active_portfolio_ids) if active_portfolio_ids is not None else None
    strategy_set = set(strategies or [])
    emotion_set = set(emotions or [])

    selected = []
    for trade in trades:
        if portfolios is not None and (trade.portfolio_id or DEFAULT_PORTFOLIO_ID) not in portfolios:
            continue
        if strategy_set and trade.strategy not in strategy_set:
            continue
        if emotion_set and trade.emotion not in emotion_set:
            continue
        if start is not None or end is not None:
            trade_date = trade.trade_date
            if trade_date is None:
                continue
            if start is not None and trade_date < start:
                continue
            if end is not None and trade_date > end:
                continue
        selected.append(trade)
    return selected


def daily_pnl_map(trades: Iterable[Trade]) -> Dict[str, float]:
    """Net PnL per ``YYYY-MM-DD`` day (trades with bad dates are skipped)."""
    rows = [
        (t.trade_date.isoformat(), coerce_pnl(t.pnl))
        for t in trades
        if t.trade_date is not None
    ]
    if not rows:
        return {}
    frame = pd.DataFrame(rows, columns=["date", "pnl"])
    return {day: float(pnl) for day, pnl in frame.groupby("date")["pnl"].sum().items()}


def monthly_stats(trades: Iterable[Trade], year: int, month: int) -> MonthlyStats:
    """PnL, trade count and win rate for one calendar month."""
    pnls = [
        coerce_pnl(t.pnl)
        for t in trades
        if t.trade_date is not None and (t.trade_date.year, t.trade_date.month) == (year, month)
    ]
    if not pnls:
        return MonthlyStats()

    wins = sum(1 for p in pnls if p > 0)
    return MonthlyStats(
        pnl=sum(pnls),
        count=len(pnls),
        win_rate=wins / len(pnls) * 100,
    )
