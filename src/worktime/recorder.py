"""Idle-timeout segmentation of activity into work intervals."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

from .clock import now
from .models import WorkInterval, elapsed
from .store import IntervalStore

logger = logging.getLogger(__name__)

DEFAULT_IDLE_TIMEOUT = timedelta(minutes=10)


@dataclass(slots=True, frozen=True)
class Activity:
    timestamp: datetime


@dataclass(slots=True, frozen=True)
class Note:
    text: str


@dataclass(slots=True, frozen=True)
class Commit:
    pass


RecorderEvent = Union[Activity, Note, Commit]


@dataclass(slots=True)
class RecorderState:
    last_event_time: datetime
    last_start_time: datetime
    note: str = ""


class ActivityRecorder:
    """Turns a stream of activity timestamps into committed work intervals.

    A gap between two activities longer than ``idle_timeout`` closes the
    current interval at the earlier activity and opens a new one at the later.
    ``Commit`` writes the open interval without closing it; the store replaces
    it on the next commit because the start is unchanged.
    """

    def __init__(
        self,
        store: IntervalStore,
        idle_timeout: timedelta = DEFAULT_IDLE_TIMEOUT,
        started_at: Optional[datetime] = None,
    ) -> None:
        self.store = store
        self.idle_timeout = idle_timeout
        start = started_at or now()
        self._state = RecorderState(last_event_time=start, last_start_time=start)

    @property
    def state(self) -> RecorderState:
        return self._state

    def handle(self, event: RecorderEvent) -> None:
        match event:
            case Activity(timestamp=timestamp):
                self._on_activity(timestamp)
            case Note(text=text):
                self._state.note += text
            case Commit():
                self._commit_open_interval()
            case _:
                raise TypeError(f"Unsupported recorder event: {event!r}")

    def activity(self, timestamp: datetime) -> None:
        self.handle(Activity(timestamp))

    def add_note(self, text: str) -> None:
        self.handle(Note(text))

    def commit(self) -> None:
        self.handle(Commit())

    def _on_activity(self, timestamp: datetime) -> None:
        state = self._state
        gap = elapsed(state.last_event_time, timestamp)
        if gap < timedelta(0):
            logger.warning(
                "Ignoring activity at %s; it precedes the last activity at %s.",
                timestamp.isoformat(),
                state.last_event_time.isoformat(),
            )
            return
        if gap > self.idle_timeout:
            logger.debug(
                "Idle gap of %s closes interval started %s.",
                gap,
                state.last_start_time.isoformat(),
            )
            self._commit_open_interval()
            state.note = ""
            state.last_start_time = timestamp
        state.last_event_time = timestamp

    def _commit_open_interval(self) -> None:
        state = self._state
        self.store.commit(
            WorkInterval(
                start=state.last_start_time,
                end=state.last_event_time,
                note=state.note,
            )
        )
