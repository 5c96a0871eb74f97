"""Lock-guarded host for the interval store and the activity recorder."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

from .clock import day_bounds, now, start_of_day, week_bounds
from .config import Settings
from .models import SpecialDay, TimeRange, WorkInterval
from .overtime import OvertimeBreakdown, overtime_breakdown
from .recorder import Activity, ActivityRecorder, Commit, Note, RecorderEvent
from .storage import read_intervals, read_special_days, write_intervals
from .store import IntervalStore, sum_duration

logger = logging.getLogger(__name__)


class WorktimeEngine:
    """Owns the store and the recorder behind one exclusive lock.

    Activity delivery, periodic commits, saves, read-side queries and the
    final shutdown all serialize on the same lock, so the terminal save can
    never interleave with an auto-save.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        data_path: Optional[Path] = None,
        special_days_path: Optional[Path] = None,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.settings = settings
        self.data_path = Path(data_path or settings.resolved_data_file)
        self.special_days_path = Path(
            special_days_path or settings.resolved_special_day_file
        )
        self.store = IntervalStore()
        self.recorder = ActivityRecorder(
            self.store, idle_timeout=settings.idle_timeout, started_at=started_at
        )
        self._lock = threading.Lock()
        self._closed = False

    def load(self) -> list[str]:
        """Load both data files; return the problems met along the way."""
        intervals = read_intervals(self.data_path)
        special_days = read_special_days(self.special_days_path)
        problems = intervals.problems + special_days.problems
        for problem in problems:
            logger.warning("Load problem: %s", problem)
        with self._lock:
            self.store.load(intervals.records, special_days.records)
        logger.info(
            "Loaded %d intervals from %s and %d special days from %s.",
            len(intervals.records),
            self.data_path,
            len(special_days.records),
            self.special_days_path,
        )
        return problems

    def handle(self, event: RecorderEvent) -> None:
        with self._lock:
            if self._closed:
                return
            self.recorder.handle(event)

    def activity(self, timestamp: Optional[datetime] = None) -> None:
        self.handle(Activity(timestamp or now()))

    def add_note(self, text: str) -> None:
        self.handle(Note(text))

    def commit(self) -> None:
        self.handle(Commit())

    def save(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._save_locked()

    def shutdown(self) -> bool:
        """Commit the open interval and write the data file a last time.

        Returns ``False`` when the engine was already shut down.
        """
        with self._lock:
            if self._closed:
                return False
            try:
                self.recorder.handle(Commit())
            finally:
                self._closed = True
                self._save_locked()
        logger.info("Worktime saved to %s.", self.data_path)
        return True

    def pending_note(self) -> str:
        with self._lock:
            return self.recorder.state.note

    @property
    def closed(self) -> bool:
        return self._closed

    def intervals(self, bounds: TimeRange) -> list[WorkInterval]:
        with self._lock:
            return list(self.store.query(bounds))

    def special_days(self) -> list[SpecialDay]:
        with self._lock:
            return self.store.special_days()

    def totals(self, moment: Optional[datetime] = None) -> tuple[timedelta, timedelta]:
        """Worked time of the day and of the ISO week containing ``moment``."""
        moment = moment or now()
        with self._lock:
            day = sum_duration(self.store.query(day_bounds(moment)))
            week = sum_duration(self.store.query(week_bounds(moment)))
        return day, week

    def overtime(
        self,
        since: Optional[date] = None,
        until: Optional[datetime] = None,
        weekly_target: Optional[timedelta] = None,
    ) -> OvertimeBreakdown:
        until = until or now()
        start_day = since or self.settings.overtime_start or until.date()
        bounds = TimeRange(start_of_day(start_day, until.tzinfo), until)
        with self._lock:
            return overtime_breakdown(
                self.store,
                self.settings.weekly_target if weekly_target is None else weekly_target,
                bounds,
            )

    def _save_locked(self) -> None:
        write_intervals(self.data_path, self.store.snapshot())
