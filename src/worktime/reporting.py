"""Console reports for recorded worktime."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, timedelta
from typing import Iterable, Optional

from .clock import day_bounds, now, week_bounds
from .engine import WorktimeEngine
from .models import TimeRange, WorkInterval, elapsed
from .overtime import OvertimeBreakdown
from .store import sum_duration


class SummaryPrinter:
    """Render human-readable summaries in the console."""

    def __init__(self, engine: WorktimeEngine) -> None:
        self.engine = engine

    def print_simple_summary(self, moment: Optional[datetime] = None) -> None:
        """Today's entries with the pauses between them, then day and week totals."""
        moment = moment or now()
        entries = self.engine.intervals(day_bounds(moment))
        previous: Optional[WorkInterval] = None
        for entry in entries:
            if previous is not None:
                print(f"  Pause: {format_duration(elapsed(previous.end, entry.start))}")
            print(_entry_line(entry))
            previous = entry

        week = sum_duration(self.engine.intervals(week_bounds(moment)))
        print(f"Current: Day: {format_duration(sum_duration(entries))}, Week: {format_duration(week)}")

    def print_range_summary(self, bounds: TimeRange) -> None:
        entries = self.engine.intervals(bounds)
        if not entries:
            print("No worktime recorded for the selected range.")
            return

        daily = weekly = monthly = timedelta(0)
        previous: Optional[WorkInterval] = None
        for entry in entries:
            if previous is not None:
                before, current = previous.start, entry.start
                if before.date() != current.date():
                    print(f"{before.strftime('%Y-%m-%d %a')}: {format_duration(daily)}")
                    daily = timedelta(0)
                if before.isocalendar()[:2] != current.isocalendar()[:2]:
                    print(f"week: {format_duration(weekly)}")
                    weekly = timedelta(0)
                if (before.year, before.month) != (current.year, current.month):
                    print(f"month: {format_duration(monthly)}")
                    monthly = timedelta(0)
                print(f"  Pause: {format_duration(elapsed(previous.end, entry.start))}")
            print(_entry_line(entry))
            duration = entry.duration
            daily += duration
            weekly += duration
            monthly += duration
            previous = entry

        print(
            f"Current: Day: {format_duration(daily)}, Week: {format_duration(weekly)}, "
            f"Month: {format_duration(monthly)}"
        )
        print(f"Total: {format_duration(sum_duration(entries))}")

    def print_overtime(
        self,
        breakdown: OvertimeBreakdown,
        since: date,
        starting_balance: timedelta = timedelta(0),
    ) -> None:
        print(f"Overtime since {since.isoformat()} ({breakdown.total_days} days)")
        print("-" * 40)
        print(f"Worked:          {format_duration(breakdown.worked)}")
        print(f"Expected:        {format_duration(breakdown.expected)}")
        print(f"Special days:    {format_duration(breakdown.special_bonus)}")
        if starting_balance:
            print(f"Carried over:    {format_duration(starting_balance)}")
        print(f"Overtime:        {format_duration(breakdown.result + starting_balance)}")


def daily_totals(entries: Iterable[WorkInterval]) -> list[tuple[date, timedelta]]:
    """Worked time per calendar day of each entry's start."""
    totals: defaultdict[date, timedelta] = defaultdict(timedelta)
    for entry in entries:
        totals[entry.start.date()] += entry.duration
    return sorted(totals.items())


def format_duration(value: timedelta) -> str:
    total_seconds = int(value.total_seconds())
    sign = "-" if total_seconds < 0 else ""
    hours, remainder = divmod(abs(total_seconds), 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{sign}{hours}h{minutes}m{secs}s"


def _entry_line(entry: WorkInterval) -> str:
    line = (
        f" Start: {entry.start.strftime('%Y-%m-%d %H:%M:%S')} "
        f"End: {entry.end.strftime('%H:%M:%S')} ({format_duration(entry.duration)})"
    )
    if entry.note:
        line += f" {entry.note!r}"
    return line
