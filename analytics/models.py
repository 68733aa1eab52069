"""
Record types for the metrics core.

Inputs (``Trade``, ``Portfolio``) are closed, frozen records normalized at
the boundary by ``from_dict``.  Outputs (``EquityPoint``, ``Metrics`` ...)
are plain dataclasses with ``to_dict`` producing the camelCase shape the
chart layer consumes.
"""

import calendar
import logging
import math
from dataclasses import dataclass, field, asdict
from datetime import date
from typing import Dict, Iterable, List, Optional

from analytics.periods import parse_date
from shared.constants import DEFAULT_PORTFOLIO_ID
from shared.exceptions import InvalidTradeError

logger = logging.getLogger(__name__)


def coerce_pnl(value) -> float:
    """Coerce a PnL value to a finite float; anything unusable becomes 0."""
    if isinstance(value, bool):
        return 0.0
    if isinstance(value, str):
        value = value.replace(",", "").strip()
    try:
        result = float(value)
    except (TypeError, ValueError):
        return 0.0
    return result if math.isfinite(result) else 0.0


def _pick(raw: Dict, *keys, default=None):
    """First non-empty value among *keys* (camelCase / snake_case aliases)."""
    for key in keys:
        value = raw.get(key)
        if value is not None and value != "":
            return value
    return default


def _optional_text(value) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def epoch_ms(d: date) -> int:
    """Milliseconds since the epoch at midnight of *d* (UTC-anchored, so stable)."""
    return calendar.timegm(d.timetuple()) * 1000


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Trade:
    """A single logged profit/loss event."""
    id: str
    date: str                       # YYYY-MM-DD, local civil date
    pnl: float                      # 0 is breakeven
    strategy: Optional[str] = None
    emotion: Optional[str] = None
    portfolio_id: str = DEFAULT_PORTFOLIO_ID
    timestamp: Optional[str] = None  # ISO instant, same-day tiebreaker only
    note: str = ""

    @property
    def trade_date(self) -> Optional[date]:
        return parse_date(self.date)

    @classmethod
    def from_dict(cls, raw: Dict) -> "Trade":
        """
        Normalize a loosely typed trade record.

        Raises:
            InvalidTradeError: if the record has no id.
        """
        trade_id = _pick(raw, "id")
        if trade_id is None:
            raise InvalidTradeError(f"Trade record has no id: {raw!r}")

        raw_date = _pick(raw, "date", default="")
        if isinstance(raw_date, date):
            raw_date = raw_date.isoformat()[:10]

        return cls(
            id=str(trade_id),
            date=str(raw_date).strip(),
            pnl=coerce_pnl(raw.get("pnl")),
            strategy=_optional_text(raw.get("strategy")),
            emotion=_optional_text(raw.get("emotion")),
            portfolio_id=str(_pick(raw, "portfolioId", "portfolio_id", default=DEFAULT_PORTFOLIO_ID)),
            timestamp=_optional_text(raw.get("timestamp")),
            note=str(raw.get("note") or ""),
        )

    def to_dict(self) -> Dict:
        return {
            "id": self.id,
            "date": self.date,
            "pnl": self.pnl,
            "strategy": self.strategy,
            "emotion": self.emotion,
            "portfolioId": self.portfolio_id,
            "timestamp": self.timestamp,
            "note": self.note,
        }


@dataclass(frozen=True)
class Portfolio:
    """An account; only ``initial_capital`` matters to the metrics core."""
    id: str
    name: str = ""
    initial_capital: float = 0.0
    profit_color: str = ""
    loss_color: str = ""

    @classmethod
    def from_dict(cls, raw: Dict) -> "Portfolio":
        capital = coerce_pnl(_pick(raw, "initialCapital", "initial_capital", default=0))
        if capital < 0:
            logger.warning(f"Portfolio {raw.get('id')!r} has negative capital {capital}, using 0")
            capital = 0.0
        return cls(
            id=str(_pick(raw, "id", default=DEFAULT_PORTFOLIO_ID)),
            name=str(raw.get("name") or ""),
            initial_capital=capital,
            profit_color=str(_pick(raw, "profitColor", "profit_color", default="")),
            loss_color=str(_pick(raw, "lossColor", "loss_color", default="")),
        )


def normalize_trades(records: Iterable[Dict]) -> List[Trade]:
    """Convert raw records to Trades, dropping (and logging) ones without an id."""
    trades = []
    for raw in records:
        if isinstance(raw, Trade):
            trades.append(raw)
            continue
        try:
            trades.append(Trade.from_dict(raw))
        except InvalidTradeError as e:
            logger.warning(f"Dropping trade record: {e}")
    return trades


def _sort_key(trade: Trade):
    # unparseable dates first, then date, timestamp (missing first), id
    trade_date = trade.trade_date
    return (
        trade_date is not None,
        trade_date or date.min,
        trade.timestamp is not None,
        trade.timestamp or "",
        trade.id,
    )


def sort_trades(trades: Iterable[Trade]) -> List[Trade]:
    """Return trades in ascending date order with a stable same-day tie-break."""
    return sorted(trades, key=_sort_key)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass
class EquityPoint:
    """One bucketed period of the equity curve."""
    label: str
    period: str                     # bucket key, or "Start" for the anchor
    period_date: date
    equity: float
    peak: float
    pnl: float
    cumulative_pnl: float
    is_new_peak: bool
    dd_pct: float                   # positive magnitude below peak
    dd_amt: float
    trade_count: int = 0
    portfolio_pnl: Dict[str, float] = field(default_factory=dict)

    @property
    def timestamp(self) -> int:
        return epoch_ms(self.period_date)

    def to_dict(self) -> Dict:
        point = {
            "date": self.label,
            "fullDate": self.period,
            "timestamp": self.timestamp,
            "equity": self.equity,
            "peak": self.peak,
            "pnl": self.pnl,
            "cumulativePnl": self.cumulative_pnl,
            "isNewPeak": self.is_new_peak,
            "ddPct": self.dd_pct,
            "ddAmt": self.dd_amt,
        }
        # split per portfolio for stacked bars
        for pid, value in self.portfolio_pnl.items():
            if value >= 0:
                point[f"{pid}_pos"] = value
            else:
                point[f"{pid}_neg"] = value
        return point


@dataclass
class DrawdownPoint:
    """Thinned projection of an EquityPoint for the underwater chart."""
    label: str
    period_date: date
    dd_pct: float                   # always <= 0

    @property
    def timestamp(self) -> int:
        return epoch_ms(self.period_date)

    def to_dict(self) -> Dict:
        return {"date": self.label, "timestamp": self.timestamp, "ddPct": self.dd_pct}


@dataclass
class StrategyStat:
    """Aggregate performance of one strategy tag."""
    pnl: float
    trades: int
    win_rate: float
    mdd_pct: float
    cur_dd_pct: float
    is_new_high: bool
    risk_reward: float
    avg_win: float
    avg_loss: float

    def to_dict(self) -> Dict:
        return {
            "pnl": self.pnl,
            "trades": self.trades,
            "winRate": self.win_rate,
            "mddPct": self.mdd_pct,
            "curDDPct": self.cur_dd_pct,
            "isNewHigh": self.is_new_high,
            "riskReward": self.risk_reward,
            "avgWin": self.avg_win,
            "avgLoss": self.avg_loss,
        }


@dataclass
class Metrics:
    """Full result bundle of ``compute_metrics``."""
    curve: List[EquityPoint]
    drawdown: List[DrawdownPoint]
    current_eq: float
    eq_change: float
    eq_change_pct: float
    current_dd: float
    max_dd: float
    win_rate: float
    profit_factor: float
    risk_reward: float
    strat_stats: Dict[str, StrategyStat]
    is_peak: bool
    sharpe: float
    avg_win: float
    avg_loss: float
    total_trades: int
    winning_trades: int = 0
    losing_trades: int = 0

    @classmethod
    def empty(cls, safe_capital: float) -> "Metrics":
        """The well-formed "no data" result."""
        return cls(
            curve=[], drawdown=[], current_eq=safe_capital,
            eq_change=0.0, eq_change_pct=0.0, current_dd=0.0, max_dd=0.0,
            win_rate=0.0, profit_factor=0.0, risk_reward=0.0, strat_stats={},
            is_peak=True, sharpe=0.0, avg_win=0.0, avg_loss=0.0, total_trades=0,
        )

    def to_dict(self) -> Dict:
        return {
            "curve": [p.to_dict() for p in self.curve],
            "drawdown": [p.to_dict() for p in self.drawdown],
            "currentEq": self.current_eq,
            "eqChange": self.eq_change,
            "eqChangePct": self.eq_change_pct,
            "currentDD": self.current_dd,
            "maxDD": self.max_dd,
            "winRate": self.win_rate,
            "pf": self.profit_factor,
            "riskReward": self.risk_reward,
            "stratStats": {name: s.to_dict() for name, s in self.strat_stats.items()},
            "isPeak": self.is_peak,
            "sharpe": self.sharpe,
            "avgWin": self.avg_win,
            "avgLoss": self.avg_loss,
            "totalTrades": self.total_trades,
            "winningTrades": self.winning_trades,
            "losingTrades": self.losing_trades,
        }


@dataclass
class Streaks:
    """Current and best streaks; current_win and current_loss are exclusive."""
    current_win: int = 0
    current_loss: int = 0
    best_win: int = 0

    def to_dict(self) -> Dict:
        return {
            "currentWin": self.current_win,
            "currentLoss": self.current_loss,
            "bestWin": self.best_win,
        }


@dataclass
class MonthlyStats:
    """Calendar-month summary shown above the calendar grid."""
    pnl: float = 0.0
    count: int = 0
    win_rate: float = 0.0

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["winRate"] = data.pop("win_rate")
        return data
