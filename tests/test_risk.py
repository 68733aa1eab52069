"""Tests for risk alerts and strategy status classification."""
import pytest

from analytics.models import Metrics, StrategyStat, Streaks
from tracker.risk import StrategyStatus, classify_strategy, evaluate_risk


def _make_stat(cur_dd_pct=0.0, is_new_high=False):
    return StrategyStat(
        pnl=100, trades=5, win_rate=60, mdd_pct=cur_dd_pct, cur_dd_pct=cur_dd_pct,
        is_new_high=is_new_high, risk_reward=1.5, avg_win=50, avg_loss=30,
    )


def _metrics_with_dd(current_dd):
    m = Metrics.empty(1000)
    m.current_dd = current_dd
    return m


class TestEvaluateRisk:

    def test_no_alerts(self):
        risk = evaluate_risk(_metrics_with_dd(5), Streaks(current_loss=1))
        assert not risk.streak_alert
        assert not risk.dd_alert
        assert not risk.is_alert

    def test_loss_streak_at_limit(self):
        risk = evaluate_risk(_metrics_with_dd(0), Streaks(current_loss=3), max_loss_streak=3)
        assert risk.streak_alert
        assert risk.is_alert

    def test_drawdown_at_threshold(self):
        risk = evaluate_risk(_metrics_with_dd(20.0), Streaks(), dd_threshold=20)
        assert risk.dd_alert
        assert risk.current_dd == 20.0

    def test_to_dict(self):
        data = evaluate_risk(_metrics_with_dd(25), Streaks(current_loss=4)).to_dict()
        assert data == {
            'streakAlert': True,
            'ddAlert': True,
            'isAlert': True,
            'currentLossStreak': 4,
            'currentDD': 25,
        }


class TestClassifyStrategy:

    def test_new_high_wins(self):
        assert classify_strategy(_make_stat(0, is_new_high=True)) is StrategyStatus.NEW_HIGH

    @pytest.mark.parametrize("dd,expected", [
        (5.0, StrategyStatus.SAFE),
        (14.99, StrategyStatus.SAFE),
        (15.0, StrategyStatus.WARNING),
        (19.9, StrategyStatus.WARNING),
        (20.0, StrategyStatus.BROKEN),
        (42.0, StrategyStatus.BROKEN),
    ])
    def test_drawdown_bands(self, dd, expected):
        assert classify_strategy(_make_stat(dd), dd_threshold=20) is expected

    def test_custom_threshold(self):
        assert classify_strategy(_make_stat(9), dd_threshold=10) is StrategyStatus.WARNING
