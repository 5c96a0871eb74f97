"""Local time helpers and calendar bounds for days and weeks."""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, tzinfo
from typing import Optional

import tzlocal

from .models import TimeRange

_local_zone: Optional[tzinfo] = None


def local_timezone() -> tzinfo:
    """Return the IANA zone of the host, resolved once per process."""
    global _local_zone
    if _local_zone is None:
        _local_zone = tzlocal.get_localzone()
    return _local_zone


def now() -> datetime:
    return datetime.now(local_timezone())


def to_local(value: datetime) -> datetime:
    """Attach or convert ``value`` to the local zone."""
    if value.tzinfo is None:
        return value.replace(tzinfo=local_timezone())
    return value.astimezone(local_timezone())


def _at(day: date, moment: time, zone: Optional[tzinfo]) -> datetime:
    # Wall-clock construction keeps DST days at their real length.
    return datetime.combine(day, moment, tzinfo=zone)


def start_of_day(day: date, zone: Optional[tzinfo] = None) -> datetime:
    return _at(day, time.min, zone)


def day_bounds(moment: datetime) -> TimeRange:
    day = moment.date()
    return TimeRange(_at(day, time.min, moment.tzinfo), _at(day, time.max, moment.tzinfo))


def week_bounds(moment: datetime) -> TimeRange:
    """ISO week (Monday to Sunday) containing ``moment``."""
    iso = moment.isocalendar()
    monday = date.fromisocalendar(iso.year, iso.week, 1)
    sunday = date.fromisocalendar(iso.year, iso.week, 7)
    return TimeRange(
        _at(monday, time.min, moment.tzinfo), _at(sunday, time.max, moment.tzinfo)
    )


def calendar_days_between(first: datetime, second: datetime) -> int:
    return (second.date() - first.date()).days


def add_days(day: date, count: int) -> date:
    return day + timedelta(days=count)
