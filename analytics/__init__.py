"""
Trade journal metrics core: period bucketing, equity curve and streaks.
"""

from .periods import Frequency, Language, period_key, period_label, period_start, advance
from .models import Trade, Portfolio, Metrics, Streaks, EquityPoint, DrawdownPoint, StrategyStat
from .metrics_engine import compute_metrics
from .streaks import compute_streaks

__all__ = [
    'Frequency', 'Language', 'period_key', 'period_label', 'period_start', 'advance',
    'Trade', 'Portfolio', 'Metrics', 'Streaks', 'EquityPoint', 'DrawdownPoint', 'StrategyStat',
    'compute_metrics', 'compute_streaks',
]
