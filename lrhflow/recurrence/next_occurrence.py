"""Next-occurrence date math for recurring tasks.

Pure functions only: no clock reads, no I/O.
"""

from __future__ import annotations

import calendar
from datetime import date, timedelta
from typing import TypeVar

from dateutil.relativedelta import relativedelta

from lrhflow.models.constants import DAYS_PER_WEEK
from lrhflow.models.recurrence import RecurrenceRule, RecurrenceType

D = TypeVar("D", bound=date)


def sunday_based_weekday(d: date) -> int:
    """Weekday with 0=Sunday ... 6=Saturday."""
    # Python weekday: Monday=0 ... Sunday=6
    return (d.weekday() + 1) % DAYS_PER_WEEK


def days_in_month(year: int, month: int) -> int:
    return calendar.monthrange(year, month)[1]


def _rule_type(rule: RecurrenceRule) -> RecurrenceType:
    try:
        return RecurrenceType(rule.type)
    except ValueError:
        return RecurrenceType.NONE


def _next_weekly(current: D, interval: int, day_of_week) -> D:
    candidate = current + timedelta(days=interval * DAYS_PER_WEEK)
    if day_of_week is None:
        return candidate
    days_to_add = (day_of_week - sunday_based_weekday(candidate) + DAYS_PER_WEEK) % DAYS_PER_WEEK
    if days_to_add == 0 and candidate <= current:
        return candidate + timedelta(days=DAYS_PER_WEEK)
    return candidate + timedelta(days=days_to_add)


def _next_monthly(current: D, interval: int, day_of_month) -> D:
    # relativedelta rolls the year over and clamps the day to the target month.
    candidate = current + relativedelta(months=interval)
    if day_of_month is None:
        return candidate
    return candidate.replace(day=min(day_of_month, days_in_month(candidate.year, candidate.month)))


def next_occurrence(current: D, rule: RecurrenceRule) -> D:
    """Compute the occurrence following `current` under `rule`.

    Accepts a `date` or `datetime` and returns the same type; the time of day is kept.
    NONE (or an unrecognized type) returns `current` unchanged, meaning "do not
    reschedule".

    Args:
        current: Reference date, usually the current instance's occurrence date
        rule: Recurrence rule

    Returns:
        Next occurrence date
    """
    interval = rule.interval or 1
    kind = _rule_type(rule)

    if kind == RecurrenceType.DAILY:
        return current + timedelta(days=interval)
    if kind == RecurrenceType.WEEKLY:
        return _next_weekly(current, interval, rule.day_of_week)
    if kind == RecurrenceType.MONTHLY:
        return _next_monthly(current, interval, rule.day_of_month)
    if kind == RecurrenceType.YEARLY:
        return current + relativedelta(years=interval)
    return current
