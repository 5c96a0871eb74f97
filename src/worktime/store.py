"""In-memory store of work intervals and special days."""

from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Iterable, Iterator

from .clock import start_of_day
from .models import SpecialDay, TimeRange, WorkInterval, as_utc

logger = logging.getLogger(__name__)


class IntervalStore:
    """Ordered collection of work intervals plus the special-day calendar.

    Intervals are kept sorted by start. The only mutation after loading is
    :meth:`commit`, which replaces the most recent interval when the new one
    shares its start, so an interval that is still open can be re-committed
    with a later end as activity continues.
    """

    def __init__(self) -> None:
        self._intervals: list[WorkInterval] = []
        self._special_days: list[SpecialDay] = []

    def __len__(self) -> int:
        return len(self._intervals)

    def load(
        self,
        intervals: Iterable[WorkInterval],
        special_days: Iterable[SpecialDay] = (),
    ) -> None:
        self._intervals = sorted(intervals, key=_order)
        self._special_days = sorted(special_days)
        logger.debug(
            "Loaded %d intervals and %d special days.",
            len(self._intervals),
            len(self._special_days),
        )

    def snapshot(self) -> list[WorkInterval]:
        return list(self._intervals)

    def special_days(self) -> list[SpecialDay]:
        return list(self._special_days)

    def commit(self, entry: WorkInterval) -> None:
        start = as_utc(entry.start)
        if self._intervals and as_utc(self._intervals[-1].start) == start:
            self._intervals.pop()
        out_of_order = bool(self._intervals) and start < as_utc(self._intervals[-1].start)
        self._intervals.append(entry)
        if out_of_order:
            logger.warning(
                "Interval starting %s committed out of order; re-sorting.",
                entry.start.isoformat(),
            )
            self._intervals.sort(key=_order)

    def query(self, bounds: TimeRange) -> Iterator[WorkInterval]:
        """Yield every interval overlapping ``bounds``, clipped to it.

        An interval overlaps when its start or its end lies in the half-open
        range, or when it covers the range entirely. Stored intervals are
        never modified; clipped results are copies.
        """
        lower, upper = as_utc(bounds.start), as_utc(bounds.end)
        for entry in self._intervals:
            start, end = entry.sort_key
            if start >= upper:
                break
            if end < lower:
                continue
            if start >= lower and end <= upper:
                yield entry
                continue
            yield replace(
                entry,
                start=bounds.start if start < lower else entry.start,
                end=bounds.end if end > upper else entry.end,
            )

    def query_special_days(self, bounds: TimeRange) -> Iterator[SpecialDay]:
        for special in self._special_days:
            midnight = start_of_day(special.date, bounds.start.tzinfo)
            if bounds.contains(midnight):
                yield special


def _order(entry: WorkInterval) -> tuple[datetime, datetime]:
    return entry.sort_key


def sum_duration(entries: Iterable[WorkInterval]) -> timedelta:
    total = timedelta(0)
    for entry in entries:
        total += entry.duration
    return total
