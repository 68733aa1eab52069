"""
Risk status for the dashboard header and strategy list.

Thresholds come from the ``risk`` config section; the functions here only
compare already-computed metrics against them.
"""

from dataclasses import dataclass
from enum import Enum

from analytics.models import Metrics, StrategyStat, Streaks
from shared.constants import DD_WARNING_BAND, DEFAULT_DD_THRESHOLD, DEFAULT_MAX_LOSS_STREAK


class StrategyStatus(str, Enum):
    NEW_HIGH = "new_high"
    SAFE = "safe"
    WARNING = "warning"
    BROKEN = "broken"


@dataclass
class RiskStatus:
    """Which risk limits the account is currently breaching."""
    streak_alert: bool
    dd_alert: bool
    current_loss_streak: int
    current_dd: float

    @property
    def is_alert(self) -> bool:
        return self.streak_alert or self.dd_alert

    def to_dict(self) -> dict:
        return {
            "streakAlert": self.streak_alert,
            "ddAlert": self.dd_alert,
            "isAlert": self.is_alert,
            "currentLossStreak": self.current_loss_streak,
            "currentDD": self.current_dd,
        }


def evaluate_risk(
    metrics: Metrics,
    streaks: Streaks,
    dd_threshold: float = DEFAULT_DD_THRESHOLD,
    max_loss_streak: int = DEFAULT_MAX_LOSS_STREAK,
) -> RiskStatus:
    """Flag a losing streak at/above *max_loss_streak* or drawdown at/above *dd_threshold* %."""
    current_dd = abs(metrics.current_dd)
    return RiskStatus(
        streak_alert=streaks.current_loss >= max_loss_streak,
        dd_alert=current_dd >= dd_threshold,
        current_loss_streak=streaks.current_loss,
        current_dd=current_dd,
    )


def classify_strategy(stat: StrategyStat, dd_threshold: float = DEFAULT_DD_THRESHOLD) -> StrategyStatus:
    """
    Bucket a strategy for the list view.

    At its high -> NEW_HIGH; current drawdown at/above the threshold ->
    BROKEN; within ``DD_WARNING_BAND`` points of it -> WARNING; else SAFE.
    """
    if stat.is_new_high:
        return StrategyStatus.NEW_HIGH
    if stat.cur_dd_pct >= dd_threshold:
        return StrategyStatus.BROKEN
    if stat.cur_dd_pct >= dd_threshold - DD_WARNING_BAND:
        return StrategyStatus.WARNING
    return StrategyStatus.SAFE
