"""
Trade Journal
Holds the journal's trades and portfolios in memory and produces the
filtered view (metrics, streaks, calendar aggregates) the dashboard shows.
Loading and saving belong to the caller.
"""

import logging
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timezone
from typing import Dict, Iterable, List, Optional

from analytics.metrics_engine import compute_metrics
from analytics.models import Metrics, MonthlyStats, Portfolio, Streaks, Trade, normalize_trades
from analytics.periods import Frequency, to_frequency
from analytics.streaks import compute_streaks
from shared.constants import (
    DEFAULT_CAPITAL,
    DEFAULT_DD_THRESHOLD,
    DEFAULT_MAX_LOSS_STREAK,
    DEFAULT_PORTFOLIO_ID,
    STREAK_GAP_DAYS,
)
from shared.types import AppConfig
from tracker.risk import RiskStatus, evaluate_risk
from tracker.trade_filter import daily_pnl_map, monthly_stats, resolve_time_range, select_trades

logger = logging.getLogger(__name__)


@dataclass
class JournalView:
    """Everything one dashboard render needs."""
    trades: List[Trade]            # filtered, newest first
    metrics: Metrics
    streaks: Streaks
    daily_pnl: Dict[str, float]
    start_date: Optional[date]
    end_date: Optional[date]
    risk: RiskStatus
    frequency: Frequency = Frequency.DAILY
    month: MonthlyStats = field(default_factory=MonthlyStats)   # calendar month containing today


class TradeJournal:
    """
    In-memory trade journal.
    """

    def __init__(
        self,
        config: AppConfig,
        trades: Iterable = (),
        portfolios: Iterable = (),
        active_portfolio_ids: Optional[Iterable[str]] = None,
    ):
        """
        Initialize the journal.

        Args:
            config: Configuration dictionary
            trades: Trade objects or raw trade dicts
            portfolios: Portfolio objects or raw portfolio dicts
            active_portfolio_ids: Portfolios included in views (default: all)
        """
        self.config = config
        self.trades: List[Trade] = normalize_trades(trades)
        # every id this journal has held, so generated ids never repeat one
        self._seen_ids = {t.id for t in self.trades}
        self._id_seq = 0
        self.portfolios: List[Portfolio] = [
            p if isinstance(p, Portfolio) else Portfolio.from_dict(p) for p in portfolios
        ]
        if not self.portfolios:
            self.portfolios = [Portfolio(id=DEFAULT_PORTFOLIO_ID, name="Main Account",
                                         initial_capital=self._default_capital)]
        if active_portfolio_ids:
            self.active_portfolio_ids = list(active_portfolio_ids)
        else:
            self.active_portfolio_ids = [p.id for p in self.portfolios]

        logger.info(
            f"TradeJournal initialized with {len(self.trades)} trades, "
            f"{len(self.portfolios)} portfolios"
        )

    # ------------------------------------------------------------------
    # Config helpers
    # ------------------------------------------------------------------

    @property
    def _journal_config(self) -> Dict:
        return self.config.get('journal') or {}

    @property
    def _risk_config(self) -> Dict:
        return self.config.get('risk') or {}

    @property
    def _default_capital(self) -> float:
        return float(self._journal_config.get('default_capital', DEFAULT_CAPITAL))

    # ------------------------------------------------------------------
    # Edits (full replacement, ids never reused)
    # ------------------------------------------------------------------

    def add_trade(self, trade: Trade) -> str:
        """
        Add a trade, assigning an id and creation timestamp when missing.

        Returns:
            Trade ID
        """
        now = datetime.now(timezone.utc)
        if not trade.id:
            trade = replace(trade, id=self._generate_id(now))
        if any(t.id == trade.id for t in self.trades):
            raise ValueError(f"Duplicate trade id: {trade.id}")
        if not trade.timestamp:
            trade = replace(trade, timestamp=now.isoformat())

        self.trades.insert(0, trade)
        self._seen_ids.add(trade.id)
        logger.info(f"Added trade: {trade.id}, P&L: {trade.pnl:.2f}")
        return trade.id

    def _generate_id(self, now: datetime) -> str:
        """Creation-time id with a per-journal sequence number that only moves forward."""
        while True:
            self._id_seq += 1
            trade_id = f"trade-{int(now.timestamp() * 1000)}-{self._id_seq}"
            if trade_id not in self._seen_ids:
                return trade_id

    def replace_trade(self, trade_id: str, trade: Trade) -> bool:
        """Replace a trade wholesale, keeping its id. Returns False when not found."""
        for i, existing in enumerate(self.trades):
            if existing.id == trade_id:
                self.trades[i] = replace(trade, id=trade_id)
                logger.info(f"Replaced trade: {trade_id}")
                return True
        logger.warning(f"Trade not found: {trade_id}")
        return False

    def delete_trade(self, trade_id: str) -> bool:
        before = len(self.trades)
        self.trades = [t for t in self.trades if t.id != trade_id]
        if len(self.trades) == before:
            logger.warning(f"Trade not found: {trade_id}")
            return False
        logger.info(f"Deleted trade: {trade_id}")
        return True

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def analyze(
        self,
        frequency=None,
        time_range=None,
        custom_start=None,
        custom_end=None,
        strategies: Optional[Iterable[str]] = None,
        emotions: Optional[Iterable[str]] = None,
        language=None,
        today: Optional[date] = None,
    ) -> JournalView:
        """
        Build the dashboard view for the given filters.

        Unset arguments fall back to the ``journal`` config section.
        """
        today = today or date.today()
        frequency = to_frequency(frequency or self._journal_config.get('frequency', 'daily'))
        time_range = time_range or self._journal_config.get('time_range', 'ALL')
        language = language or self._journal_config.get('language', 'en')

        start, end = resolve_time_range(time_range, today, custom_start, custom_end)
        filtered = select_trades(
            self.trades,
            active_portfolio_ids=self.active_portfolio_ids,
            strategies=strategies,
            emotions=emotions,
            start=start,
            end=end,
        )

        metrics = compute_metrics(
            filtered,
            self.portfolios,
            self.active_portfolio_ids,
            frequency=frequency,
            language=language,
            start_date=start,
            end_date=end,
            today=today,
            fallback_capital=self._default_capital,
        )
        streaks = compute_streaks(
            filtered,
            max_gap_days=self._risk_config.get('streak_gap_days', STREAK_GAP_DAYS),
        )
        risk = evaluate_risk(
            metrics,
            streaks,
            dd_threshold=self._risk_config.get('dd_threshold', DEFAULT_DD_THRESHOLD),
            max_loss_streak=self._risk_config.get('max_loss_streak', DEFAULT_MAX_LOSS_STREAK),
        )

        newest_first = sorted(filtered, key=lambda t: t.trade_date or date.min, reverse=True)
        return JournalView(
            trades=newest_first,
            metrics=metrics,
            streaks=streaks,
            daily_pnl=daily_pnl_map(filtered),
            start_date=start,
            end_date=end,
            risk=risk,
            frequency=frequency,
            month=monthly_stats(filtered, today.year, today.month),
        )

    def strategy_metrics(self, strategy: str, today: Optional[date] = None, language=None) -> Metrics:
        """Daily, unwindowed metrics over every trade tagged *strategy*."""
        trades = [t for t in self.trades if t.strategy == strategy]
        return compute_metrics(
            trades,
            self.portfolios,
            self.active_portfolio_ids,
            frequency=Frequency.DAILY,
            language=language or self._journal_config.get('language', 'en'),
            today=today,
            fallback_capital=self._default_capital,
        )
