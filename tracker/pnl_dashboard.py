"""
P&L Dashboard
Displays the journal's equity, streaks, risk status and strategy table.
"""

import logging
from datetime import datetime
from typing import Dict

from analytics.formatting import format_axis_date, format_currency, format_decimal, format_pnl_k
from shared.constants import DEFAULT_DD_THRESHOLD, START_KEY
from shared.types import SummaryDict
from tracker.risk import StrategyStatus, classify_strategy
from tracker.trade_journal import JournalView

logger = logging.getLogger(__name__)

RECENT_PERIODS = 10

_STATUS_LABELS = {
    StrategyStatus.NEW_HIGH: "NEW HIGH",
    StrategyStatus.SAFE: "safe",
    StrategyStatus.WARNING: "caution",
    StrategyStatus.BROKEN: "BROKEN",
}


class JournalDashboard:
    """
    Display P&L and performance dashboard for a journal view.
    """

    def __init__(self, config: Dict, hide_amounts: bool = False):
        """
        Initialize the dashboard.

        Args:
            config: Configuration dictionary
            hide_amounts: Mask currency amounts (percentages stay visible)
        """
        self.config = config
        self.hide_amounts = hide_amounts
        self.dd_threshold = float((config.get('risk') or {}).get('dd_threshold', DEFAULT_DD_THRESHOLD))

        logger.info("JournalDashboard initialized")

    def display_dashboard(self, view: JournalView):
        """
        Display comprehensive dashboard.
        """
        print("\n" + "=" * 80)
        print("TRADE JOURNAL - P&L DASHBOARD")
        print("=" * 80)
        print(f"Generated: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        if view.start_date or view.end_date:
            print(f"Window: {view.start_date or '...'} -> {view.end_date or 'today'}")
        print("")

        self._display_overall_stats(view)
        self._display_recent_periods(view)
        self._display_streaks(view)
        self.display_strategies(view)

        print("=" * 80 + "\n")

    def _display_overall_stats(self, view: JournalView):
        """Display equity and aggregate statistics."""
        m = view.metrics

        print("OVERALL STATISTICS")
        print("-" * 80)
        if m.total_trades == 0:
            print("No trades yet")
            print("")
            return

        print(f"Current Equity: {format_currency(m.current_eq, self.hide_amounts)}"
              f"{'  (new high)' if m.is_peak else ''}")
        print(f"Change: {format_pnl_k(m.eq_change, self.hide_amounts)} ({format_decimal(m.eq_change_pct)}%)")
        print(f"Total Trades: {m.total_trades}  (W {m.winning_trades} / L {m.losing_trades})")
        print(f"Win Rate: {format_decimal(m.win_rate)}%")
        print(f"Profit Factor: {format_decimal(m.profit_factor)}")
        print(f"Risk/Reward: {format_decimal(m.risk_reward)}")
        print(f"Average Win: {format_currency(m.avg_win, self.hide_amounts)}")
        print(f"Average Loss: {format_currency(m.avg_loss, self.hide_amounts)}")
        print(f"Current Drawdown: {format_decimal(m.current_dd)}%")
        print(f"Max Drawdown: {format_decimal(m.max_dd)}%")
        print(f"Sharpe Ratio: {format_decimal(m.sharpe)}")

        if view.month.count:
            print(f"This Month: {format_pnl_k(view.month.pnl, self.hide_amounts)} over "
                  f"{view.month.count} trade(s), {format_decimal(view.month.win_rate)}% won")

        if view.risk.dd_alert:
            print(f"  ⚠️  Drawdown at/above {format_decimal(self.dd_threshold)}% limit")
        print("")

    def _display_recent_periods(self, view: JournalView, limit: int = RECENT_PERIODS):
        """Display the last few points of the equity curve."""
        points = [p for p in view.metrics.curve if p.period != START_KEY][-limit:]
        if not points:
            return

        print(f"RECENT {view.frequency.value.upper()} PERIODS")
        print("-" * 80)
        print(f"{'Period':<10}{'P&L':>12}{'Equity':>14}{'DD%':>8}{'Trades':>8}")
        for p in points:
            marker = "  *" if p.is_new_peak else ""
            print(
                f"{format_axis_date(p.period_date, view.frequency):<10}"
                f"{format_pnl_k(p.pnl, self.hide_amounts):>12}"
                f"{format_currency(p.equity, self.hide_amounts):>14}"
                f"{format_decimal(p.dd_pct):>8}"
                f"{p.trade_count:>8}{marker}"
            )
        print("")

    def _display_streaks(self, view: JournalView):
        """Display current and best streaks."""
        s = view.streaks

        print("STREAKS")
        print("-" * 80)
        if s.current_win:
            print(f"Current: {s.current_win} win(s)")
        elif s.current_loss:
            print(f"Current: {s.current_loss} loss(es)")
        else:
            print("Current: none")
        print(f"Best Win Streak: {s.best_win}")

        if view.risk.streak_alert:
            print("  ⚠️  Losing streak limit reached")
        print("")

    def display_strategies(self, view: JournalView):
        """Display the per-strategy table."""
        stats = view.metrics.strat_stats

        print("STRATEGY PERFORMANCE")
        print("-" * 80)
        if not stats:
            print("No tagged trades")
            print("")
            return

        print(f"{'Strategy':<20}{'Net':>12}{'Trades':>8}{'Win%':>8}{'R/R':>7}{'MDD%':>8}{'DD%':>8}  Status")
        ranked = sorted(stats.items(), key=lambda item: item[1].pnl, reverse=True)
        for name, stat in ranked:
            status = _STATUS_LABELS[classify_strategy(stat, self.dd_threshold)]
            print(
                f"{name[:19]:<20}"
                f"{format_pnl_k(stat.pnl, self.hide_amounts):>12}"
                f"{stat.trades:>8}"
                f"{format_decimal(stat.win_rate):>8}"
                f"{format_decimal(stat.risk_reward):>7}"
                f"{format_decimal(stat.mdd_pct):>8}"
                f"{format_decimal(stat.cur_dd_pct):>8}  {status}"
            )
        print("")

    def generate_summary(self, view: JournalView) -> SummaryDict:
        """
        Generate summary data for external use.

        Returns:
            JSON-serialisable dictionary
        """
        return {
            'timestamp': datetime.now().isoformat(),
            'metrics': view.metrics.to_dict(),
            'streaks': view.streaks.to_dict(),
            'risk': view.risk.to_dict(),
            'month': view.month.to_dict(),
            'daily_pnl': view.daily_pnl,
            'strategy_status': {
                name: classify_strategy(stat, self.dd_threshold).value
                for name, stat in view.metrics.strat_stats.items()
            },
        }
