"""Tests for period bucketing, labels and calendar stepping."""
from datetime import date, datetime

import pytest

from analytics.periods import (
    Frequency,
    Language,
    advance,
    parse_date,
    period_key,
    period_label,
    period_range,
    period_start,
    to_frequency,
    to_language,
    try_advance,
)
from shared.exceptions import InvalidFrequencyError


# ---------------------------------------------------------------------------
# parse_date / coercion
# ---------------------------------------------------------------------------

class TestParseDate:

    def test_plain_date_string(self):
        assert parse_date('2024-05-13') == date(2024, 5, 13)

    def test_iso_datetime_keeps_written_date(self):
        """A late-evening UTC instant must not slide into the next day."""
        assert parse_date('2024-05-13T23:30:00Z') == date(2024, 5, 13)

    def test_date_and_datetime_objects(self):
        assert parse_date(date(2024, 1, 2)) == date(2024, 1, 2)
        assert parse_date(datetime(2024, 1, 2, 22, 0)) == date(2024, 1, 2)

    @pytest.mark.parametrize("value", ['', 'not-a-date', '2024-13-01', None, 20240101])
    def test_unparseable_returns_none(self, value):
        assert parse_date(value) is None

    def test_to_frequency_accepts_strings(self):
        assert to_frequency('Weekly') is Frequency.WEEKLY
        assert to_frequency(Frequency.YEARLY) is Frequency.YEARLY

    def test_to_frequency_rejects_unknown(self):
        with pytest.raises(InvalidFrequencyError):
            to_frequency('hourly')

    def test_unknown_frequency_is_value_error(self):
        """Callers catching ValueError still see bad frequencies."""
        with pytest.raises(ValueError):
            to_frequency('fortnightly')

    def test_to_language_defaults_to_english(self):
        assert to_language('zh') is Language.ZH
        assert to_language('fr') is Language.EN


# ---------------------------------------------------------------------------
# period_start / period_key
# ---------------------------------------------------------------------------

class TestPeriodStart:

    def test_daily_is_identity(self):
        assert period_start('2024-05-13', Frequency.DAILY) == date(2024, 5, 13)

    def test_weekly_monday_start(self):
        # 2024-05-15 is a Wednesday
        assert period_start('2024-05-15', 'weekly') == date(2024, 5, 13)

    def test_weekly_sunday_rolls_back_six_days(self):
        # 2024-03-17 is a Sunday
        assert period_start('2024-03-17', 'weekly') == date(2024, 3, 11)

    def test_weekly_monday_is_own_start(self):
        assert period_start('2024-03-11', 'weekly') == date(2024, 3, 11)

    def test_weekly_crosses_year_boundary(self):
        # 2025-01-01 is a Wednesday
        assert period_start('2025-01-01', 'weekly') == date(2024, 12, 30)

    def test_monthly(self):
        assert period_start('2024-02-29', 'monthly') == date(2024, 2, 1)

    @pytest.mark.parametrize("day,expected", [
        ('2024-01-31', date(2024, 1, 1)),
        ('2024-05-13', date(2024, 4, 1)),
        ('2024-08-15', date(2024, 7, 1)),
        ('2024-12-31', date(2024, 10, 1)),
    ])
    def test_quarterly(self, day, expected):
        assert period_start(day, 'quarterly') == expected

    def test_yearly(self):
        assert period_start('2024-08-15', 'yearly') == date(2024, 1, 1)

    def test_invalid_date_returns_none(self):
        assert period_start('garbage', 'monthly') is None

    def test_period_key_format(self):
        assert period_key('2024-05-15', 'weekly') == '2024-05-13'
        assert period_key('2024-05-15', 'quarterly') == '2024-04-01'

    def test_period_key_invalid(self):
        assert period_key('nope', 'daily') == 'Invalid'

    def test_bucket_start_is_idempotent(self):
        for freq in Frequency:
            start = period_start('2024-05-15', freq)
            assert period_start(start, freq) == start


# ---------------------------------------------------------------------------
# advance / period_range
# ---------------------------------------------------------------------------

class TestAdvance:

    def test_month_step_clamps_to_month_end(self):
        assert advance(date(2024, 1, 31), 'monthly') == date(2024, 2, 29)

    def test_month_step_non_leap_year(self):
        assert advance(date(2023, 1, 31), 'monthly') == date(2023, 2, 28)

    def test_quarter_step(self):
        assert advance(date(2024, 10, 1), 'quarterly') == date(2025, 1, 1)

    def test_negative_steps(self):
        assert advance(date(2024, 1, 1), 'daily', -1) == date(2023, 12, 31)
        assert advance(date(2024, 3, 11), 'weekly', -1) == date(2024, 3, 4)
        assert advance(date(2024, 1, 1), 'yearly', -1) == date(2023, 1, 1)

    def test_range_includes_empty_periods(self):
        days = list(period_range(date(2024, 1, 1), date(2024, 1, 5), 'daily'))
        assert days == [date(2024, 1, d) for d in range(1, 6)]

    def test_range_aligns_bounds_to_buckets(self):
        months = list(period_range(date(2024, 1, 20), date(2024, 3, 2), 'monthly'))
        assert months == [date(2024, 1, 1), date(2024, 2, 1), date(2024, 3, 1)]

    def test_range_is_capped(self):
        days = list(period_range(date(2000, 1, 1), date(2024, 1, 1), 'daily', max_periods=10))
        assert len(days) == 10
        assert days[-1] == date(2000, 1, 10)

    def test_try_advance_off_calendar_edges(self):
        assert try_advance(date(1, 1, 1), 'daily', -1) is None
        assert try_advance(date(1, 1, 1), 'monthly', -1) is None
        assert try_advance(date(9999, 1, 1), 'yearly') is None
        assert try_advance(date(9999, 12, 31), 'daily') is None
        assert try_advance(date(2024, 1, 31), 'monthly') == date(2024, 2, 29)

    def test_range_stops_at_end_of_calendar(self):
        days = list(period_range(date(9999, 12, 30), date(9999, 12, 31), 'daily'))
        assert days == [date(9999, 12, 30), date(9999, 12, 31)]
        years = list(period_range(date(9998, 5, 1), date(9999, 12, 31), 'yearly'))
        assert years == [date(9998, 1, 1), date(9999, 1, 1)]

    def test_range_empty_when_reversed(self):
        assert list(period_range(date(2024, 2, 1), date(2024, 1, 1), 'daily')) == []


# ---------------------------------------------------------------------------
# period_label
# ---------------------------------------------------------------------------

class TestPeriodLabel:

    def test_start_label_english(self):
        assert period_label('Start', 'daily', 'en') == 'Start'

    def test_start_label_chinese(self):
        assert period_label('Start', 'monthly', Language.ZH) == '起點'

    def test_daily_label_is_month_day(self):
        assert period_label('2024-05-13', 'daily') == '05/13'

    def test_other_frequencies_use_raw_key(self):
        assert period_label('2024-04-01', 'quarterly') == '2024-04-01'
        assert period_label('2024-05-13', 'weekly') == '2024-05-13'

    def test_empty_key(self):
        assert period_label('', 'daily') == ''
