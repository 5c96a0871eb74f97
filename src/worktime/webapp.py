"""FastAPI application that exposes a local API over the worktime engine."""

from __future__ import annotations

import logging
import threading
from datetime import date, datetime, timedelta
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from .clock import day_bounds, local_timezone, now, start_of_day
from .collector import ActivityCollector
from .config import Settings
from .engine import WorktimeEngine
from .models import TimeRange, WorkInterval
from .reporting import daily_totals, format_duration
from .store import sum_duration

logger = logging.getLogger(__name__)


class CollectorRunner:
    """Manage the activity collector in a background thread."""

    def __init__(self, engine: WorktimeEngine) -> None:
        self._engine = engine
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._stop_event: Optional[threading.Event] = None

    def start(self) -> None:
        with self._lock:
            if self._thread and self._thread.is_alive():
                return
            if self._engine.closed:
                logger.warning("Engine already shut down; collector not restarted.")
                return
            stop_event = threading.Event()
            collector = ActivityCollector(self._engine)
            thread = threading.Thread(
                target=self._run_collector,
                args=(collector, stop_event),
                daemon=True,
            )
            self._thread = thread
            self._stop_event = stop_event
            thread.start()
            logger.info("Collector background thread started.")

    def stop(self) -> None:
        thread: Optional[threading.Thread] = None
        with self._lock:
            if not self._thread or not self._thread.is_alive() or not self._stop_event:
                return
            self._stop_event.set()
            thread = self._thread
            self._thread = None
            self._stop_event = None
        if thread:
            thread.join(timeout=10)
            logger.info("Collector background thread stopped.")

    def is_running(self) -> bool:
        with self._lock:
            return bool(self._thread and self._thread.is_alive())

    @staticmethod
    def _run_collector(collector: ActivityCollector, stop_event: threading.Event) -> None:
        try:
            collector.run_until_stopped(stop_event)
        except Exception:
            logger.exception("Collector thread failed.")


class NotePayload(BaseModel):
    text: str = Field(min_length=1)

    model_config = ConfigDict(extra="forbid")


def create_app(
    *,
    settings: Optional[Settings] = None,
    engine: Optional[WorktimeEngine] = None,
    start_collector: bool = True,
) -> FastAPI:
    """Instantiate the FastAPI application around a loaded engine."""
    resolved_settings = settings or (engine.settings if engine else Settings())
    if engine is None:
        engine = WorktimeEngine(resolved_settings)
        engine.load()
    runner = CollectorRunner(engine)

    app = FastAPI(title="worktime", version="0.3.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.engine = engine
    app.state.collector_runner = runner

    @app.on_event("startup")
    async def _startup() -> None:
        if start_collector:
            runner.start()

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        runner.stop()

    @app.get("/api/status")
    def status(request: Request) -> Dict[str, Any]:
        current: WorktimeEngine = request.app.state.engine
        return {
            "collector_running": request.app.state.collector_runner.is_running(),
            "data_path": str(current.data_path),
            "special_days_path": str(current.special_days_path),
            "idle_timeout_minutes": resolved_settings.idle_timeout.total_seconds() / 60.0,
            "commit_interval_seconds": resolved_settings.commit_interval.total_seconds(),
            "auto_save_interval_seconds": resolved_settings.auto_save_interval.total_seconds(),
            "weekly_hours": resolved_settings.weekly_hours,
        }

    @app.get("/api/intervals")
    def intervals(
        request: Request,
        start: Optional[str] = Query(
            default=None,
            description="Start date in YYYY-MM-DD format (inclusive).",
        ),
        end: Optional[str] = Query(
            default=None,
            description="End date in YYYY-MM-DD format (inclusive).",
        ),
    ) -> Dict[str, Any]:
        start_day = _parse_date(start)
        end_day = _parse_date(end) if end else start_day
        if end_day < start_day:
            raise HTTPException(
                status_code=400, detail="end date must be on or after start date"
            )
        zone = local_timezone()
        bounds = TimeRange(
            start_of_day(start_day, zone), start_of_day(end_day + timedelta(days=1), zone)
        )
        entries = request.app.state.engine.intervals(bounds)
        return {
            "start": start_day.isoformat(),
            "end": end_day.isoformat(),
            "total_seconds": sum_duration(entries).total_seconds(),
            "days": [
                {"date": day.isoformat(), "seconds": total.total_seconds()}
                for day, total in daily_totals(entries)
            ],
            "intervals": [_interval_payload(entry) for entry in entries],
        }

    @app.get("/api/summary")
    def summary(
        request: Request,
        date: Optional[str] = Query(
            default=None,
            description="Target date in YYYY-MM-DD format.",
        ),
    ) -> Dict[str, Any]:
        target_day = _parse_date(date)
        moment = start_of_day(target_day, local_timezone())
        current: WorktimeEngine = request.app.state.engine
        entries = current.intervals(day_bounds(moment))
        day_total, week_total = current.totals(moment)
        return {
            "date": target_day.isoformat(),
            "totals": {
                "day_seconds": day_total.total_seconds(),
                "week_seconds": week_total.total_seconds(),
            },
            "intervals": [_interval_payload(entry) for entry in entries],
        }

    @app.get("/api/overtime")
    def overtime(
        request: Request,
        since: Optional[str] = Query(
            default=None,
            description="First counted day in YYYY-MM-DD format.",
        ),
        weekly_hours: Optional[float] = Query(default=None, ge=0),
    ) -> Dict[str, Any]:
        first = _parse_date(since) if since else resolved_settings.overtime_start
        if first is None:
            raise HTTPException(status_code=400, detail="since is required")
        current = now()
        if first > current.date():
            raise HTTPException(status_code=400, detail="since must not be in the future")
        target = (
            timedelta(hours=weekly_hours)
            if weekly_hours is not None
            else resolved_settings.weekly_target
        )
        breakdown = request.app.state.engine.overtime(
            since=first, until=current, weekly_target=target
        )
        balance = breakdown.result + resolved_settings.overtime_carry
        return {
            "since": first.isoformat(),
            "total_days": breakdown.total_days,
            "worked_seconds": breakdown.worked.total_seconds(),
            "expected_seconds": breakdown.expected.total_seconds(),
            "special_bonus_seconds": breakdown.special_bonus.total_seconds(),
            "carry_seconds": resolved_settings.overtime_carry.total_seconds(),
            "overtime_seconds": balance.total_seconds(),
            "overtime": format_duration(balance),
        }

    @app.post("/api/notes")
    def add_note(payload: NotePayload, request: Request) -> Dict[str, Any]:
        current: WorktimeEngine = request.app.state.engine
        current.add_note(payload.text)
        return {"note": current.pending_note()}

    return app


def _parse_date(value: Optional[str]) -> date:
    if not value:
        return now().date()
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise HTTPException(status_code=400, detail="Invalid date format") from exc


def _interval_payload(entry: WorkInterval) -> Dict[str, Any]:
    return {
        "start": entry.start.isoformat(),
        "end": entry.end.isoformat(),
        "note": entry.note,
        "duration_seconds": entry.duration_seconds,
    }
