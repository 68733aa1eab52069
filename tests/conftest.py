"""Shared test fixtures."""
from datetime import date

import pytest

from analytics.models import Portfolio, Trade

TODAY = date(2024, 3, 15)   # a Friday


def _make_trade(date_str, pnl, trade_id=None, strategy=None, emotion=None,
               portfolio_id='main', timestamp=None):
    """Build a Trade with sensible defaults."""
    return Trade(
        id=trade_id or f"t-{date_str}-{pnl}",
        date=date_str,
        pnl=pnl,
        strategy=strategy,
        emotion=emotion,
        portfolio_id=portfolio_id,
        timestamp=timestamp,
    )


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def portfolios():
    return [
        Portfolio(id='main', name='Main Account', initial_capital=1000),
        Portfolio(id='swing', name='Swing', initial_capital=500),
    ]


@pytest.fixture
def sample_config():
    return {
        'journal': {
            'frequency': 'daily',
            'language': 'en',
            'time_range': 'ALL',
            'default_capital': 100000,
        },
        'risk': {
            'dd_threshold': 20,
            'max_loss_streak': 3,
            'streak_gap_days': 5,
        },
        'logging': {'level': 'WARNING', 'file': '/tmp/test_journal.log', 'console': False},
    }


@pytest.fixture
def sample_trades():
    """A small mixed journal across two portfolios and two strategies."""
    return [
        _make_trade('2024-03-01', 200, 'a', strategy='Breakout', emotion='Swing'),
        _make_trade('2024-03-04', -80, 'b', strategy='Breakout', emotion='Scalping'),
        _make_trade('2024-03-05', 150, 'c', strategy='Trend', portfolio_id='swing'),
        _make_trade('2024-03-08', -40, 'd', strategy='Trend', emotion='Swing'),
        _make_trade('2024-03-12', 60, 'e', emotion='Event'),
        _make_trade('2024-03-14', 90, 'f', strategy='Breakout', portfolio_id='swing'),
    ]
