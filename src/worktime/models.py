"""Domain models for accounted working time."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta, timezone
from enum import Enum


def as_utc(moment: datetime) -> datetime:
    """Aware timestamps in UTC; naive ones are returned unchanged.

    Python compares and subtracts two datetimes sharing one ``tzinfo`` by
    wall-clock reading, ignoring ``fold``. Going through UTC gives real order
    and elapsed time across daylight-saving changes.
    """
    if moment.tzinfo is None:
        return moment
    return moment.astimezone(timezone.utc)


def elapsed(earlier: datetime, later: datetime) -> timedelta:
    return as_utc(later) - as_utc(earlier)


@dataclass(slots=True, frozen=True, order=True)
class WorkInterval:
    """A contiguous span of work time with a free-text note."""

    start: datetime
    end: datetime
    note: str = ""

    def __post_init__(self) -> None:
        if as_utc(self.end) < as_utc(self.start):
            raise ValueError(
                f"interval end {self.end.isoformat()} precedes start {self.start.isoformat()}"
            )

    @property
    def duration(self) -> timedelta:
        return elapsed(self.start, self.end)

    @property
    def duration_seconds(self) -> float:
        return self.duration.total_seconds()

    @property
    def sort_key(self) -> tuple[datetime, datetime]:
        return as_utc(self.start), as_utc(self.end)


class SpecialDayKind(str, Enum):
    VACATION = "Vacation"
    SICK = "Sick"
    LEAVE = "Leave"
    HOLIDAY = "Holiday"


@dataclass(slots=True, frozen=True, order=True)
class SpecialDay:
    """A calendar date that is not expected to be worked."""

    date: date
    kind: SpecialDayKind


@dataclass(slots=True, frozen=True)
class TimeRange:
    """Pair of timestamps; membership is half-open ``[start, end)``."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        if as_utc(self.end) < as_utc(self.start):
            raise ValueError("range end must not precede range start")

    def contains(self, moment: datetime) -> bool:
        return as_utc(self.start) <= as_utc(moment) < as_utc(self.end)
