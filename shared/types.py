"""TypedDict definitions for major data shapes used across the system."""

from typing import TypedDict, List, Dict


class RawTrade(TypedDict, total=False):
    """A trade record as it arrives from storage / import.

    Everything is optional because upstream data is loosely typed;
    ``Trade.from_dict`` normalizes it.
    """
    id: str
    date: str
    pnl: float
    strategy: str
    emotion: str
    note: str
    portfolioId: str
    timestamp: str


class RawPortfolio(TypedDict, total=False):
    """A portfolio record as it arrives from storage."""
    id: str
    name: str
    initialCapital: float
    profitColor: str
    lossColor: str


class JournalSnapshot(TypedDict, total=False):
    """On-disk snapshot consumed by the CLI."""
    trades: List[RawTrade]
    portfolios: List[RawPortfolio]
    activePortfolioIds: List[str]


class JournalConfig(TypedDict, total=False):
    """Journal defaults."""
    frequency: str
    language: str
    time_range: str
    default_capital: float


class RiskConfig(TypedDict, total=False):
    """Risk alert thresholds."""
    dd_threshold: float
    max_loss_streak: int
    streak_gap_days: int


class LoggingConfig(TypedDict, total=False):
    """Logging configuration."""
    level: str
    file: str
    console: bool


class AppConfig(TypedDict, total=False):
    """Top-level application configuration."""
    journal: JournalConfig
    risk: RiskConfig
    logging: LoggingConfig


class SummaryDict(TypedDict):
    """Return type of JournalDashboard.generate_summary."""
    timestamp: str
    metrics: Dict
    streaks: Dict
    risk: Dict
    strategy_status: Dict[str, str]
    month: Dict
    daily_pnl: Dict[str, float]
