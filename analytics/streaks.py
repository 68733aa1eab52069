"""
Win/loss streak detection.

The current streak is read backwards from the most recent trade.  It ends
at the first trade of the opposite sign, at any breakeven trade, or at a
pause in trading longer than ``max_gap_days`` calendar days between two
consecutive trades of the streak.
"""

import logging
from typing import Optional, Sequence

from analytics.models import Streaks, Trade, coerce_pnl, sort_trades
from shared.constants import STREAK_GAP_DAYS

logger = logging.getLogger(__name__)


def best_win_streak(ordered: Sequence[Trade]) -> int:
    """Longest run of consecutive winning trades (breakeven resets the run)."""
    best = run = 0
    for trade in ordered:
        if coerce_pnl(trade.pnl) > 0:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return best


def compute_streaks(
    trades: Sequence[Trade],
    max_gap_days: Optional[int] = STREAK_GAP_DAYS,
) -> Streaks:
    """
    Compute current win/loss streaks and the best historical win streak.

    Args:
        trades: Trades in any order; they are sorted by date first.
        max_gap_days: Largest allowed gap (in days) between consecutive
            streak trades; None disables the staleness rule.

    Returns:
        Streaks with at most one of current_win / current_loss non-zero.
    """
    ordered = sort_trades(trades)
    streaks = Streaks(best_win=best_win_streak(ordered))

    last_counted = None
    for trade in reversed(ordered):
        pnl = coerce_pnl(trade.pnl)
        if pnl == 0:
            break

        trade_date = trade.trade_date
        if max_gap_days is not None and last_counted is not None:
            if trade_date is None or (last_counted - trade_date).days > max_gap_days:
                break

        if pnl > 0:
            if streaks.current_loss:
                break
            streaks.current_win += 1
        else:
            if streaks.current_win:
                break
            streaks.current_loss += 1
        last_counted = trade_date

    logger.debug(f"Streaks: {streaks}")
    return streaks
