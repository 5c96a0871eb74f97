"""Input-activity collector that feeds the worktime engine."""

from __future__ import annotations

import logging
import signal
import threading
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional

from .clock import now
from .engine import WorktimeEngine
from .lock import InstanceLock
from .models import elapsed
from .paths import get_lock_path

logger = logging.getLogger(__name__)


class InputListener:
    """Reports every keyboard and mouse action through ``on_activity``."""

    def __init__(self, on_activity: Callable[[], None]) -> None:
        self._on_activity = on_activity
        self._listeners: list[Any] = []

    def start(self) -> None:
        # pynput needs a display at import time on X11; import on demand.
        from pynput import keyboard, mouse

        self._listeners = [
            mouse.Listener(
                on_move=self._mouse_event,
                on_click=self._mouse_event,
                on_scroll=self._mouse_event,
            ),
            keyboard.Listener(on_press=self._key_event),
        ]
        for listener in self._listeners:
            listener.daemon = True
            listener.start()
        logger.info("Listening for keyboard and mouse activity.")

    def stop(self) -> None:
        for listener in self._listeners:
            listener.stop()
        self._listeners = []

    def _mouse_event(self, *_args: Any) -> None:
        self._notify()

    def _key_event(self, _key: Any) -> None:
        self._notify()

    def _notify(self) -> None:
        try:
            self._on_activity()
        except Exception:  # pragma: no cover - listener threads swallow errors
            logger.exception("Failed to record activity.")


class ActivityCollector:
    """Runs the commit and auto-save schedule around an input listener."""

    def __init__(
        self,
        engine: WorktimeEngine,
        *,
        listener: Optional[InputListener] = None,
        on_commit: Optional[Callable[[WorktimeEngine], None]] = None,
        lock_path: Optional[Path] = None,
    ) -> None:
        self.engine = engine
        self.settings = engine.settings
        self._listener = listener or InputListener(engine.activity)
        self._on_commit = on_commit
        self._instance_lock = InstanceLock(lock_path or get_lock_path(engine.data_path))
        self._last_save = now()

    def run_forever(self) -> None:
        stop_event = threading.Event()
        self._instance_lock.acquire()
        previous = signal.signal(signal.SIGTERM, lambda *_: stop_event.set())
        try:
            self._run_loop(stop_event)
        except KeyboardInterrupt:
            logger.info("Collector interrupted; saving worktime.")
        finally:
            signal.signal(signal.SIGTERM, previous)
            self._shutdown()

    def run_until_stopped(self, stop_event: threading.Event) -> None:
        """Run the collector until the provided event is set."""
        self._instance_lock.acquire()
        try:
            self._run_loop(stop_event)
        finally:
            self._shutdown()

    def tick(self, current: Optional[datetime] = None) -> None:
        """Commit the open interval and save when the auto-save period is due."""
        current = current or now()
        self.engine.commit()
        if self._on_commit is not None:
            self._on_commit(self.engine)
        if elapsed(self._last_save, current) >= self.settings.auto_save_interval:
            logger.debug("Auto-save to %s.", self.engine.data_path)
            self.engine.save()
            self._last_save = current

    def _run_loop(self, stop_event: threading.Event) -> None:
        logger.info("Starting collector; writing to %s", self.engine.data_path)
        self._listener.start()
        interval = self.settings.commit_interval.total_seconds()
        while not stop_event.wait(interval):
            self.tick()

    def _shutdown(self) -> None:
        try:
            self._listener.stop()
            self.engine.shutdown()
        finally:
            self._instance_lock.release()
            logger.info("Collector stopped.")
