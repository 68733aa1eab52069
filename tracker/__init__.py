"""
Journal state, trade selection and P&L dashboard.
"""

from .trade_journal import TradeJournal, JournalView
from .pnl_dashboard import JournalDashboard

__all__ = ['TradeJournal', 'JournalView', 'JournalDashboard']
