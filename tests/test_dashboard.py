"""Tests for the JournalDashboard display and summary."""
import json

import pytest

from analytics.models import Trade
from tracker.pnl_dashboard import JournalDashboard
from tracker.trade_journal import TradeJournal


@pytest.fixture
def view(sample_config, sample_trades, portfolios, today):
    return TradeJournal(sample_config, trades=sample_trades, portfolios=portfolios).analyze(today=today)


class TestDisplay:

    def test_dashboard_sections(self, sample_config, view, capsys):
        JournalDashboard(sample_config).display_dashboard(view)
        out = capsys.readouterr().out
        assert 'OVERALL STATISTICS' in out
        assert 'STREAKS' in out
        assert 'STRATEGY PERFORMANCE' in out
        assert '$1,880' in out
        assert 'Total Trades: 6' in out

    def test_hidden_amounts(self, sample_config, view, capsys):
        JournalDashboard(sample_config, hide_amounts=True).display_dashboard(view)
        out = capsys.readouterr().out
        assert '$1,880' not in out
        assert '****' in out

    def test_empty_view(self, sample_config, today, capsys):
        empty = TradeJournal(sample_config).analyze(today=today)
        JournalDashboard(sample_config).display_dashboard(empty)
        out = capsys.readouterr().out
        assert 'No trades yet' in out
        assert 'No tagged trades' in out

    def test_strategy_table_ranked_by_pnl(self, sample_config, view, capsys):
        JournalDashboard(sample_config).display_strategies(view)
        out = capsys.readouterr().out
        assert out.index('Breakout') < out.index('Trend')

    def test_streak_alert_shown(self, sample_config, portfolios, today, capsys):
        trades = [Trade(id=str(i), date=f'2024-03-{12 + i}', pnl=-10) for i in range(3)]
        losing = TradeJournal(sample_config, trades=trades, portfolios=portfolios).analyze(today=today)
        JournalDashboard(sample_config).display_dashboard(losing)
        assert 'Losing streak limit reached' in capsys.readouterr().out

    def test_recent_periods_use_axis_dates(self, sample_config, view, capsys):
        JournalDashboard(sample_config).display_dashboard(view)
        out = capsys.readouterr().out
        assert 'RECENT DAILY PERIODS' in out
        assert '03/14' in out
        assert 'This Month: $380 over 6 trade(s), 66.67% won' in out


class TestSummary:

    def test_summary_is_json_serialisable(self, sample_config, view):
        summary = JournalDashboard(sample_config).generate_summary(view)
        encoded = json.dumps(summary, default=str)
        assert 'currentEq' in encoded
        assert summary['metrics']['totalTrades'] == 6
        assert set(summary['strategy_status']) == {'Breakout', 'Trend'}
        assert summary['risk']['isAlert'] is False

    def test_strategy_status_values(self, sample_config, view):
        summary = JournalDashboard(sample_config).generate_summary(view)
        assert summary['strategy_status']['Breakout'] == 'new_high'
