from datetime import date, datetime, timedelta

from worktime.models import SpecialDay, SpecialDayKind, TimeRange, WorkInterval
from worktime.overtime import calculate_overtime, overtime_breakdown
from worktime.store import IntervalStore

WEEK = timedelta(hours=40)


def hours(value: float) -> timedelta:
    return timedelta(hours=value)


def make_store(intervals=(), special_days=()) -> IntervalStore:
    store = IntervalStore()
    store.load(intervals, special_days)
    return store


def day_range(first: date, last: date) -> TimeRange:
    return TimeRange(datetime.combine(first, datetime.min.time()), datetime.combine(last, datetime.min.time()))


def test_two_weekdays_without_work():
    result = calculate_overtime(make_store(), WEEK, day_range(date(2023, 5, 2), date(2023, 5, 4)))

    assert result == hours(-16)


def test_weekend_only_range_expects_nothing():
    result = calculate_overtime(make_store(), WEEK, day_range(date(2023, 5, 6), date(2023, 5, 8)))

    assert result == hours(0)


def test_full_calendar_year():
    result = calculate_overtime(make_store(), WEEK, day_range(date(2023, 1, 1), date(2024, 1, 1)))

    assert result == hours(-2080)


def test_special_day_credits_one_workday():
    bounds = day_range(date(2023, 5, 1), date(2023, 5, 6))
    without = calculate_overtime(make_store(), WEEK, bounds)
    vacation = make_store(special_days=[SpecialDay(date(2023, 5, 3), SpecialDayKind.VACATION)])

    with_vacation = calculate_overtime(vacation, WEEK, bounds)

    assert without == hours(-40)
    assert with_vacation - without == WEEK / 5


def test_special_day_on_weekend_or_outside_range_earns_nothing():
    store = make_store(
        special_days=[
            SpecialDay(date(2023, 5, 6), SpecialDayKind.HOLIDAY),
            SpecialDay(date(2023, 5, 10), SpecialDayKind.SICK),
        ]
    )

    result = calculate_overtime(store, WEEK, day_range(date(2023, 5, 1), date(2023, 5, 8)))

    assert result == hours(-40)


def test_duplicate_special_days_are_additive():
    store = make_store(
        special_days=[
            SpecialDay(date(2023, 5, 3), SpecialDayKind.VACATION),
            SpecialDay(date(2023, 5, 3), SpecialDayKind.SICK),
        ]
    )

    result = calculate_overtime(store, WEEK, day_range(date(2023, 5, 2), date(2023, 5, 4)))

    assert result == hours(0)


def test_worked_time_offsets_expectation():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 2, 9), datetime(2023, 5, 2, 17, 30))]
    )

    result = calculate_overtime(store, WEEK, day_range(date(2023, 5, 2), date(2023, 5, 3)))

    assert result == hours(0.5)


def test_range_end_day_is_not_counted():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 3, 9), datetime(2023, 5, 3, 12))]
    )
    bounds = TimeRange(datetime(2023, 5, 2), datetime(2023, 5, 3, 15))

    result = calculate_overtime(store, WEEK, bounds)

    assert result == hours(-8)


def test_range_start_is_moved_to_start_of_day():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 2, 9), datetime(2023, 5, 2, 12))]
    )
    bounds = TimeRange(datetime(2023, 5, 2, 13), datetime(2023, 5, 3))

    result = calculate_overtime(store, WEEK, bounds)

    assert result == hours(-5)


def test_work_crossing_the_range_end_is_clipped():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 2, 20), datetime(2023, 5, 3, 2))]
    )

    result = calculate_overtime(store, WEEK, day_range(date(2023, 5, 2), date(2023, 5, 3)))

    assert result == hours(-4)


def test_partial_week_starting_on_friday():
    breakdown = overtime_breakdown(
        make_store(), WEEK, day_range(date(2023, 5, 5), date(2023, 5, 15))
    )

    assert breakdown.total_days == 10
    assert breakdown.expected_whole_weeks == WEEK
    assert breakdown.expected_partial_weeks == hours(8)
    assert breakdown.result == hours(-48)


def test_empty_range_is_zero_on_every_term():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 2, 9), datetime(2023, 5, 2, 17))],
        [SpecialDay(date(2023, 5, 2), SpecialDayKind.LEAVE)],
    )
    moment = datetime(2023, 5, 2, 12)

    breakdown = overtime_breakdown(store, WEEK, TimeRange(moment, moment))

    assert breakdown.total_days == 0
    assert breakdown.worked == timedelta(0)
    assert breakdown.expected == timedelta(0)
    assert breakdown.special_bonus == timedelta(0)
    assert breakdown.result == timedelta(0)


def test_breakdown_terms_add_up():
    store = make_store(
        [WorkInterval(datetime(2023, 5, 8, 8), datetime(2023, 5, 8, 18))],
        [SpecialDay(date(2023, 5, 9), SpecialDayKind.HOLIDAY)],
    )

    breakdown = overtime_breakdown(store, WEEK, day_range(date(2023, 5, 1), date(2023, 5, 10)))

    assert breakdown.worked == hours(10)
    assert breakdown.expected_whole_weeks == WEEK
    assert breakdown.expected_partial_weeks == hours(16)
    assert breakdown.special_bonus == hours(8)
    assert breakdown.expected == hours(48)
    assert breakdown.result == hours(-38)


def test_daylight_saving_week_counts_calendar_days(local_zone):
    bounds = TimeRange(
        datetime(2023, 3, 20, tzinfo=local_zone), datetime(2023, 3, 27, tzinfo=local_zone)
    )

    breakdown = overtime_breakdown(make_store(), WEEK, bounds)

    assert breakdown.total_days == 7
    assert breakdown.result == -WEEK
