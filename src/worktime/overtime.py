"""Overtime relative to a weekly target on a Monday to Friday schedule."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .clock import add_days, calendar_days_between, day_bounds
from .models import TimeRange
from .store import IntervalStore, sum_duration

WORKDAYS_PER_WEEK = 5
_SATURDAY = 5


@dataclass(slots=True, frozen=True)
class OvertimeBreakdown:
    worked: timedelta
    expected_whole_weeks: timedelta
    expected_partial_weeks: timedelta
    special_bonus: timedelta
    total_days: int

    @property
    def expected(self) -> timedelta:
        return self.expected_whole_weeks + self.expected_partial_weeks - self.special_bonus

    @property
    def result(self) -> timedelta:
        return (
            self.worked
            - self.expected_whole_weeks
            - self.expected_partial_weeks
            + self.special_bonus
        )


def overtime_breakdown(
    store: IntervalStore, weekly_target: timedelta, bounds: TimeRange
) -> OvertimeBreakdown:
    """Compute the terms of the overtime figure for ``bounds``.

    Both ends are moved back to the start of their day, so the day of
    ``bounds.end`` itself is not counted. Each weekday is expected to hold a
    fifth of the weekly target; weekends expect nothing. Special days on a
    weekday credit their fifth back, whatever their kind.
    """
    start_of_calc = day_bounds(bounds.start).start
    start_of_today = day_bounds(bounds.end).start
    calc_range = TimeRange(start_of_calc, start_of_today)
    daily_target = weekly_target / WORKDAYS_PER_WEEK

    worked = sum_duration(store.query(calc_range))

    total_days = calendar_days_between(start_of_calc, start_of_today)
    whole_weeks, partial_days = divmod(total_days, 7)
    expected_whole_weeks = weekly_target * whole_weeks

    expected_partial_weeks = timedelta(0)
    first_partial_day = add_days(start_of_calc.date(), whole_weeks * 7)
    for offset in range(partial_days):
        if add_days(first_partial_day, offset).weekday() < _SATURDAY:
            expected_partial_weeks += daily_target

    special_bonus = timedelta(0)
    for special in store.query_special_days(calc_range):
        if special.date.weekday() < _SATURDAY:
            special_bonus += daily_target

    return OvertimeBreakdown(
        worked=worked,
        expected_whole_weeks=expected_whole_weeks,
        expected_partial_weeks=expected_partial_weeks,
        special_bonus=special_bonus,
        total_days=total_days,
    )


def calculate_overtime(
    store: IntervalStore, weekly_target: timedelta, bounds: TimeRange
) -> timedelta:
    return overtime_breakdown(store, weekly_target, bounds).result
