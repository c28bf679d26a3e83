"""Tests for next-occurrence date math."""

import pytest
from datetime import date, datetime, timedelta

from lrhflow.models.recurrence import RecurrenceRule, RecurrenceType
from lrhflow.recurrence.next_occurrence import days_in_month, next_occurrence, sunday_based_weekday


def _rule(kind: RecurrenceType, **kwargs) -> RecurrenceRule:
    return RecurrenceRule(type=kind, **kwargs)


class TestDaily:
    def test_scenario_daily_interval_one(self):
        assert next_occurrence(date(2024, 3, 10), _rule(RecurrenceType.DAILY)) == date(2024, 3, 11)

    @pytest.mark.parametrize("interval", [1, 2, 5, 10, 45])
    def test_adds_interval_days(self, interval):
        start = date(2024, 12, 20)
        result = next_occurrence(start, _rule(RecurrenceType.DAILY, interval=interval))
        assert result == start + timedelta(days=interval)

    def test_crosses_year_boundary(self):
        assert next_occurrence(date(2024, 12, 31), _rule(RecurrenceType.DAILY)) == date(2025, 1, 1)


class TestWeekly:
    def test_scenario_anchor_later_in_week(self):
        """Wednesday base, Friday anchor: one week on, then forward to that week's Friday."""
        rule = _rule(RecurrenceType.WEEKLY, day_of_week=5)
        assert next_occurrence(date(2024, 3, 6), rule) == date(2024, 3, 15)

    def test_scenario_anchor_same_weekday(self):
        """Same weekday as base: the interval already advanced a week, so no extra week is added."""
        rule = _rule(RecurrenceType.WEEKLY, day_of_week=3)
        assert next_occurrence(date(2024, 3, 6), rule) == date(2024, 3, 13)

    def test_without_anchor_adds_whole_weeks(self):
        rule = _rule(RecurrenceType.WEEKLY, interval=2)
        assert next_occurrence(date(2024, 3, 6), rule) == date(2024, 3, 20)

    def test_anchor_earlier_in_week_with_interval(self):
        # Wed + 14 days = Wed 2024-03-20, then forward to Monday 2024-03-25.
        rule = _rule(RecurrenceType.WEEKLY, interval=2, day_of_week=1)
        assert next_occurrence(date(2024, 3, 6), rule) == date(2024, 3, 25)

    def test_sunday_anchor_is_zero(self):
        rule = _rule(RecurrenceType.WEEKLY, day_of_week=0)
        result = next_occurrence(date(2024, 3, 6), rule)
        assert result == date(2024, 3, 17)
        assert result.weekday() == 6

    def test_anchor_property_holds_for_every_weekday(self):
        """Result always falls on the anchor and is strictly later than the base."""
        start = date(2024, 1, 1)
        for offset in range(0, 60):
            base = start + timedelta(days=offset)
            for anchor in range(7):
                result = next_occurrence(base, _rule(RecurrenceType.WEEKLY, day_of_week=anchor))
                assert sunday_based_weekday(result) == anchor
                assert result > base


class TestMonthly:
    def test_scenario_leap_year_clamp(self):
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=31)
        assert next_occurrence(date(2024, 1, 31), rule) == date(2024, 2, 29)

    def test_non_leap_year_clamp(self):
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=31)
        assert next_occurrence(date(2023, 1, 31), rule) == date(2023, 2, 28)

    def test_thirty_day_month_clamp(self):
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=31)
        assert next_occurrence(date(2024, 3, 31), rule) == date(2024, 4, 30)

    def test_anchor_restores_day_after_short_month(self):
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=31)
        assert next_occurrence(date(2024, 2, 29), rule) == date(2024, 3, 31)

    def test_anchor_moves_day_within_month(self):
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=15)
        assert next_occurrence(date(2024, 1, 3), rule) == date(2024, 2, 15)

    def test_month_rolls_into_next_year(self):
        rule = _rule(RecurrenceType.MONTHLY, interval=3)
        assert next_occurrence(date(2024, 11, 10), rule) == date(2025, 2, 10)

    def test_without_anchor_clamps_to_month_end(self):
        assert next_occurrence(date(2024, 1, 31), _rule(RecurrenceType.MONTHLY)) == date(2024, 2, 29)

    def test_anchor_property_holds_for_every_day(self):
        for anchor in range(1, 32):
            for month in range(1, 13):
                base = date(2023, month, 1)
                result = next_occurrence(base, _rule(RecurrenceType.MONTHLY, day_of_month=anchor))
                assert result.day == min(anchor, days_in_month(result.year, result.month))


class TestYearly:
    def test_adds_years(self):
        rule = _rule(RecurrenceType.YEARLY, interval=2)
        assert next_occurrence(date(2024, 6, 1), rule) == date(2026, 6, 1)

    def test_leap_day_clamps_to_february_end(self):
        assert next_occurrence(date(2024, 2, 29), _rule(RecurrenceType.YEARLY)) == date(2025, 2, 28)


class TestNoAdvance:
    def test_none_returns_input(self):
        assert next_occurrence(date(2024, 3, 10), _rule(RecurrenceType.NONE)) == date(2024, 3, 10)

    def test_unrecognized_type_returns_input(self):
        rule = RecurrenceRule.model_construct(
            type="HOURLY", interval=1, day_of_week=None, day_of_month=None, end_date=None
        )
        assert next_occurrence(date(2024, 3, 10), rule) == date(2024, 3, 10)


class TestDatetimeInputs:
    def test_time_of_day_is_preserved(self):
        base = datetime(2024, 3, 6, 9, 30)
        result = next_occurrence(base, _rule(RecurrenceType.WEEKLY, day_of_week=5))
        assert result == datetime(2024, 3, 15, 9, 30)
        assert isinstance(result, datetime)

    def test_pure_function_same_inputs_same_output(self):
        base = datetime(2024, 1, 31, 12, 0)
        rule = _rule(RecurrenceType.MONTHLY, day_of_month=31)
        assert next_occurrence(base, rule) == next_occurrence(base, rule)
        assert base == datetime(2024, 1, 31, 12, 0)
