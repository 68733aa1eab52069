"""Shared constants used across the trade journal.

This is the single canonical location for all named constants.  Do NOT
create secondary ``constants.py`` files elsewhere in the tree.
"""

import os

# ---------------------------------------------------------------------------
# Standardized project paths
# Override via JOURNAL_LOGS_DIR / JOURNAL_CONFIG env vars.
# ---------------------------------------------------------------------------
PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
LOGS_DIR = os.environ.get('JOURNAL_LOGS_DIR', os.path.join(PROJECT_ROOT, 'logs'))
CONFIG_PATH = os.environ.get('JOURNAL_CONFIG', os.path.join(PROJECT_ROOT, 'config.yaml'))

# ---------------------------------------------------------------------------
# Capital baseline
# ---------------------------------------------------------------------------
DEFAULT_PORTFOLIO_ID = 'main'
DEFAULT_CAPITAL = 100000.0       # used when active capital sums to <= 0

# ---------------------------------------------------------------------------
# Ratio sentinels (never surface inf / NaN to renderers)
# ---------------------------------------------------------------------------
PROFIT_FACTOR_CAP = 999.0        # gross loss == 0 with some profit
RISK_REWARD_CAP = 10.0           # strategy with wins but no losses
PEAK_TOLERANCE = 0.01            # equity within this of peak counts as "at peak"

# ---------------------------------------------------------------------------
# Timeline walk
# ---------------------------------------------------------------------------
MAX_TIMELINE_PERIODS = 36500     # ~100 years of daily buckets

# Periods per year, used to annualize the Sharpe-like ratio
ANNUALIZATION_FACTORS = {
    'daily': 252,
    'weekly': 52,
    'monthly': 12,
    'quarterly': 4,
    'yearly': 1,
}

# ---------------------------------------------------------------------------
# Streaks & risk
# ---------------------------------------------------------------------------
STREAK_GAP_DAYS = 5              # a pause longer than this ends the current streak
DEFAULT_DD_THRESHOLD = 20.0      # percent
DD_WARNING_BAND = 5.0            # warning zone: this many points below the threshold
DEFAULT_MAX_LOSS_STREAK = 3

# ---------------------------------------------------------------------------
# Labels
# ---------------------------------------------------------------------------
INVALID_PERIOD = 'Invalid'
START_KEY = 'Start'
START_LABELS = {
    'en': 'Start',
    'zh': '起點',
}
