"""
Metrics Engine
Turns a list of trades into the equity curve, drawdown series, aggregate
statistics and per-strategy breakdown rendered by the dashboard.

Everything here is a pure function of its arguments: no storage, no clock
reads beyond the ``today`` default, no mutation of the inputs.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

import numpy as np
import pandas as pd

from analytics.models import (
    DrawdownPoint,
    EquityPoint,
    Metrics,
    Portfolio,
    StrategyStat,
    Trade,
    coerce_pnl,
    sort_trades,
)
from analytics.periods import (
    Language,
    parse_date,
    period_key,
    period_label,
    period_range,
    period_start,
    to_frequency,
    try_advance,
)
from shared.constants import (
    ANNUALIZATION_FACTORS,
    DEFAULT_CAPITAL,
    DEFAULT_PORTFOLIO_ID,
    INVALID_PERIOD,
    PEAK_TOLERANCE,
    PROFIT_FACTOR_CAP,
    RISK_REWARD_CAP,
    START_KEY,
)

logger = logging.getLogger(__name__)


@dataclass
class PeriodBucket:
    """Trades aggregated into one period."""
    total: float = 0.0
    trade_count: int = 0
    portfolio_pnl: Dict[str, float] = field(default_factory=dict)


def safe_capital(
    portfolios: Iterable[Portfolio],
    active_portfolio_ids: Iterable[str],
    fallback: float = DEFAULT_CAPITAL,
) -> float:
    """Sum of initial capital over active portfolios, floored to *fallback* when <= 0."""
    active = set(active_portfolio_ids)
    total = sum(coerce_pnl(p.initial_capital) for p in portfolios if p.id in active)
    return total if total > 0 else fallback


def bucket_trades(trades: Sequence[Trade], frequency) -> Dict[str, PeriodBucket]:
    """
    Group trades by period key.

    Trades whose date cannot be parsed fall into the invalid bucket and are
    left out (with a warning) rather than aborting the computation.

    Returns:
        Mapping of bucket key -> PeriodBucket (total PnL, count, per-portfolio split).
    """
    if not trades:
        return {}

    freq = to_frequency(frequency)
    frame = pd.DataFrame({
        "key": [period_key(t.date, freq) for t in trades],
        "portfolio": [t.portfolio_id or DEFAULT_PORTFOLIO_ID for t in trades],
        "pnl": [coerce_pnl(t.pnl) for t in trades],
    })

    invalid = frame["key"] == INVALID_PERIOD
    if invalid.any():
        logger.warning(f"Skipping {int(invalid.sum())} trade(s) with unparseable dates in equity curve")
        frame = frame[~invalid]

    buckets: Dict[str, PeriodBucket] = {}
    by_portfolio = frame.groupby(["key", "portfolio"], sort=False)["pnl"].sum()
    for (key, pid), pnl in by_portfolio.items():
        bucket = buckets.setdefault(key, PeriodBucket())
        bucket.portfolio_pnl[pid] = float(pnl)
        bucket.total += float(pnl)

    for key, count in frame.groupby("key", sort=False).size().items():
        buckets[key].trade_count = int(count)

    return buckets


def compute_strategy_stats(
    sorted_trades: Sequence[Trade],
    capital: float,
) -> Dict[str, StrategyStat]:
    """
    Per-strategy statistics over every tagged trade, replayed in date order.

    Drawdown is measured on the strategy's own running PnL (peak starts at
    0) and expressed as a percent of *capital*.  Untagged trades are ignored.
    """
    stats: Dict[str, StrategyStat] = {}
    tagged = [t for t in sorted_trades if t.strategy]
    if not tagged:
        return stats

    frame = pd.DataFrame({
        "strategy": [t.strategy for t in tagged],
        "pnl": [coerce_pnl(t.pnl) for t in tagged],
    })

    for name, group in frame.groupby("strategy", sort=False):
        pnls = group["pnl"].to_numpy(dtype=float)
        running = np.cumsum(pnls)
        peaks = np.maximum.accumulate(np.maximum(running, 0.0))
        max_dd_amt = float(np.max(peaks - running))

        count = len(pnls)
        wins = int((pnls > 0).sum())
        losses = int((pnls < 0).sum())
        gross_profit = float(pnls[pnls > 0].sum())
        gross_loss = float(-pnls[pnls < 0].sum())

        avg_win = gross_profit / wins if wins > 0 else 0.0
        avg_loss = gross_loss / losses if losses > 0 else 0.0
        if losses > 0 and gross_loss > 0:
            risk_reward = avg_win / avg_loss
        elif gross_profit > 0:
            risk_reward = RISK_REWARD_CAP
        else:
            risk_reward = 0.0

        net = float(running[-1])
        peak = float(peaks[-1])
        stats[name] = StrategyStat(
            pnl=net,
            trades=count,
            win_rate=wins / count * 100,
            mdd_pct=max_dd_amt / capital * 100,
            cur_dd_pct=(peak - net) / capital * 100,
            is_new_high=net >= peak - PEAK_TOLERANCE,
            risk_reward=risk_reward,
            avg_win=avg_win,
            avg_loss=avg_loss,
        )

    return stats


def _sharpe(curve: Sequence[EquityPoint], frequency) -> float:
    """Annualized mean/stdev of period-over-period returns; 0 with < 2 returns."""
    equities = np.array([p.equity for p in curve], dtype=float)
    if len(equities) < 3:
        return 0.0

    prev = equities[:-1]
    valid = prev > 0
    returns = (equities[1:][valid] - prev[valid]) / prev[valid]
    if len(returns) < 2:
        return 0.0

    std = float(returns.std(ddof=1))
    if not np.isfinite(std) or std <= 0:
        return 0.0
    factor = ANNUALIZATION_FACTORS[to_frequency(frequency).value]
    return float(returns.mean() / std * np.sqrt(factor))


def _in_window(point: EquityPoint, frequency, start: Optional[date], end: Optional[date]) -> bool:
    """True when the point's period overlaps the inclusive [start, end] window."""
    if point.period == START_KEY:
        return start is None
    if start is not None:
        next_start = try_advance(point.period_date, frequency)
        if next_start is not None and next_start <= start:
            return False
    if end is not None and point.period_date > end:
        return False
    return True


def _window_bound(value, name: str) -> Optional[date]:
    if value is None:
        return None
    parsed = parse_date(value)
    if parsed is None:
        logger.warning(f"Ignoring unparseable {name} filter: {value!r}")
    return parsed


def compute_metrics(
    trades: Sequence[Trade],
    portfolios: Sequence[Portfolio],
    active_portfolio_ids: Iterable[str],
    frequency="daily",
    language=Language.EN,
    start_date=None,
    end_date=None,
    today: Optional[date] = None,
    fallback_capital: float = DEFAULT_CAPITAL,
) -> Metrics:
    """
    Compute the full metrics bundle for a (pre-filtered) trade list.

    Args:
        trades: Trades to analyse; strategy stats and win/loss counts always
            cover all of them.
        portfolios: Portfolio definitions.
        active_portfolio_ids: Ids whose initial capital forms the baseline.
        frequency: Bucketing frequency (``Frequency`` or its string value).
        language: Label language for the curve.
        start_date: Optional inclusive display-window start (curve/drawdown only).
        end_date: Optional inclusive display-window end (curve/drawdown only).
        today: Local date treated as "now"; defaults to ``date.today()``.
        fallback_capital: Baseline used when active capital sums to <= 0.

    Returns:
        Metrics. Never raises for malformed individual trades.
    """
    freq = to_frequency(frequency)
    capital = safe_capital(portfolios, active_portfolio_ids, fallback_capital)

    if not trades:
        return Metrics.empty(capital)

    today = today or date.today()
    ordered = sort_trades(trades)
    strat_stats = compute_strategy_stats(ordered, capital)

    # Aggregate win/loss over every trade passed in
    pnls = np.array([coerce_pnl(t.pnl) for t in ordered], dtype=float)
    wins = int((pnls > 0).sum())
    losses = int((pnls < 0).sum())
    gross_profit = float(pnls[pnls > 0].sum())
    gross_loss = float(-pnls[pnls < 0].sum())

    # Timeline: first trade's period through the period containing today
    buckets = bucket_trades(ordered, freq)
    dated = [t.trade_date for t in ordered if t.trade_date is not None]
    first = dated[0] if dated else today
    last = max(today, dated[-1]) if dated else today
    first_bucket = period_start(first, freq)
    # no room before year 1: anchor on the first bucket itself
    anchor = try_advance(first_bucket, freq, -1) or first_bucket

    equity = capital
    peak = capital
    max_dd = 0.0
    curve = [EquityPoint(
        label=period_label(START_KEY, freq, language),
        period=START_KEY,
        period_date=anchor,
        equity=equity,
        peak=peak,
        pnl=0.0,
        cumulative_pnl=0.0,
        is_new_peak=True,
        dd_pct=0.0,
        dd_amt=0.0,
    )]

    for cursor in period_range(first, last, freq):
        key = cursor.isoformat()
        bucket = buckets.get(key) or PeriodBucket()
        equity += bucket.total

        is_new_peak = False
        if equity >= peak:
            peak = equity
            # flat periods sitting at the high are not new peaks
            is_new_peak = bucket.total != 0

        dd_amt = peak - equity
        dd_pct = dd_amt / peak * 100 if peak > 0 else 0.0
        max_dd = max(max_dd, dd_pct)

        curve.append(EquityPoint(
            label=period_label(key, freq, language),
            period=key,
            period_date=cursor,
            equity=equity,
            peak=peak,
            pnl=bucket.total,
            cumulative_pnl=equity - capital,
            is_new_peak=is_new_peak,
            dd_pct=dd_pct,
            dd_amt=dd_amt,
            trade_count=bucket.trade_count,
            portfolio_pnl=dict(bucket.portfolio_pnl),
        ))

    start = _window_bound(start_date, "start date")
    end = _window_bound(end_date, "end date")
    if start is not None or end is not None:
        display = [p for p in curve if _in_window(p, freq, start, end)]
    else:
        display = curve
    drawdown = [
        DrawdownPoint(label=p.label, period_date=p.period_date, dd_pct=-p.dd_pct if p.dd_pct else 0.0)
        for p in display
    ]

    total = len(ordered)
    current_dd = (peak - equity) / peak * 100 if peak > 0 else 0.0
    if gross_loss == 0:
        profit_factor = PROFIT_FACTOR_CAP if gross_profit > 0 else 0.0
    else:
        profit_factor = gross_profit / gross_loss
    if wins > 0 and losses > 0:
        risk_reward = (gross_profit / wins) / (gross_loss / losses)
    else:
        risk_reward = 0.0

    metrics = Metrics(
        curve=display,
        drawdown=drawdown,
        current_eq=equity,
        eq_change=equity - capital,
        eq_change_pct=(equity - capital) / capital * 100,
        current_dd=current_dd,
        max_dd=max_dd,
        win_rate=wins / total * 100,
        profit_factor=profit_factor,
        risk_reward=risk_reward,
        strat_stats=strat_stats,
        is_peak=equity >= peak - PEAK_TOLERANCE,
        sharpe=_sharpe(curve, freq),
        avg_win=gross_profit / wins if wins > 0 else 0.0,
        avg_loss=gross_loss / losses if losses > 0 else 0.0,
        total_trades=total,
        winning_trades=wins,
        losing_trades=losses,
    )

    logger.debug(
        f"Metrics computed: {total} trades, {len(curve)} {freq.value} points, "
        f"equity {equity:,.2f}, max DD {max_dd:.2f}%"
    )
    return metrics
