"""Command-line interface for worktime."""

from __future__ import annotations

import logging
import threading
import webbrowser
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Optional

import typer

from .clock import local_timezone, now, start_of_day
from .config import ConfigError, Settings, load_settings
from .engine import WorktimeEngine
from .lock import InstanceLockError
from .models import TimeRange

app = typer.Typer(help="Account working time from keyboard and mouse activity.")


@app.callback(no_args_is_help=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose logs."),
    config_path: Optional[Path] = typer.Option(
        None, "--config", path_type=Path, help="Location of worktime.toml."
    ),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    try:
        ctx.obj = load_settings(config_path)
    except ConfigError as exc:
        raise typer.BadParameter(str(exc), param_hint="--config") from exc


DataOption = typer.Option(
    None, "--data", path_type=Path, help="Location of the worktime CSV file."
)
SpecialDaysOption = typer.Option(
    None, "--special-days", path_type=Path, help="Location of the special days CSV file."
)


@app.command()
def collect(
    ctx: typer.Context,
    data_path: Optional[Path] = DataOption,
    special_days_path: Optional[Path] = SpecialDaysOption,
    timeout_minutes: Optional[float] = typer.Option(
        None,
        "--timeout",
        min=0.1,
        help="Minutes without input before a new interval starts.",
    ),
    commit_seconds: Optional[float] = typer.Option(
        None,
        "--commit-interval",
        min=0.5,
        help="Seconds between commits of the open interval.",
    ),
    auto_save_seconds: Optional[float] = typer.Option(
        None,
        "--auto-save",
        min=1.0,
        help="Seconds between writes of the data file.",
    ),
    live_summary: bool = typer.Option(
        False, "--live-summary", help="Print today's summary after every commit."
    ),
) -> None:
    """Record activity until interrupted."""
    from .collector import ActivityCollector

    settings = _settings(
        ctx,
        data_path,
        special_days_path,
        idle_timeout=timedelta(minutes=timeout_minutes) if timeout_minutes else None,
        commit_interval=timedelta(seconds=commit_seconds) if commit_seconds else None,
        auto_save_interval=timedelta(seconds=auto_save_seconds) if auto_save_seconds else None,
    )
    engine = _loaded_engine(settings)
    collector = ActivityCollector(
        engine, on_commit=_print_live_summary if live_summary else None
    )
    try:
        collector.run_forever()
    except InstanceLockError as exc:
        typer.echo(f"Another worktime collector is running: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.command()
def summary(
    ctx: typer.Context,
    data_path: Optional[Path] = DataOption,
    special_days_path: Optional[Path] = SpecialDaysOption,
) -> None:
    """Print today's intervals with day and week totals."""
    from .reporting import SummaryPrinter

    engine = _loaded_engine(_settings(ctx, data_path, special_days_path))
    SummaryPrinter(engine).print_simple_summary()


@app.command()
def report(
    ctx: typer.Context,
    start: str = typer.Option(..., "--start", help="First day (YYYY-MM-DD)."),
    end: Optional[str] = typer.Option(
        None, "--end", help="Last day, inclusive (YYYY-MM-DD). Defaults to the start day."
    ),
    data_path: Optional[Path] = DataOption,
    special_days_path: Optional[Path] = SpecialDaysOption,
) -> None:
    """Print every interval in a date range with day, week and month subtotals."""
    from .reporting import SummaryPrinter

    first = _parse_day(start, "--start")
    last = _parse_day(end, "--end") if end else first
    if last < first:
        raise typer.BadParameter("must not precede --start", param_hint="--end")
    zone = local_timezone()
    bounds = TimeRange(start_of_day(first, zone), start_of_day(last + timedelta(days=1), zone))
    engine = _loaded_engine(_settings(ctx, data_path, special_days_path))
    SummaryPrinter(engine).print_range_summary(bounds)


@app.command()
def overtime(
    ctx: typer.Context,
    since: Optional[str] = typer.Option(
        None, "--since", help="First day counted (YYYY-MM-DD). Defaults to overtime_start."
    ),
    weekly_hours: Optional[float] = typer.Option(
        None, "--weekly-hours", min=0.0, help="Expected hours per Monday-Friday week."
    ),
    data_path: Optional[Path] = DataOption,
    special_days_path: Optional[Path] = SpecialDaysOption,
) -> None:
    """Print overtime from a start day up to the beginning of today."""
    from .reporting import SummaryPrinter

    settings = _settings(ctx, data_path, special_days_path, weekly_hours=weekly_hours)
    first = _parse_day(since, "--since") if since else settings.overtime_start
    if first is None:
        raise typer.BadParameter(
            "pass --since or set overtime_start in the configuration", param_hint="--since"
        )
    current = now()
    if first > current.date():
        raise typer.BadParameter("must not be in the future", param_hint="--since")
    engine = _loaded_engine(settings)
    breakdown = engine.overtime(since=first, until=current)
    SummaryPrinter(engine).print_overtime(
        breakdown, first, starting_balance=settings.overtime_carry
    )


@app.command()
def web(
    ctx: typer.Context,
    host: str = typer.Option("127.0.0.1", "--host", help="Interface to bind the dashboard."),
    port: int = typer.Option(
        8765, "--port", min=1, max=65535, help="TCP port for the dashboard."
    ),
    data_path: Optional[Path] = DataOption,
    special_days_path: Optional[Path] = SpecialDaysOption,
    open_browser: bool = typer.Option(
        True,
        "--open-browser/--no-open-browser",
        help="Automatically launch the dashboard in your default browser.",
    ),
) -> None:
    """Start the local dashboard with the collector running in the background."""
    import uvicorn

    from .webapp import create_app

    dashboard = create_app(settings=_settings(ctx, data_path, special_days_path))
    if open_browser:
        url = f"http://{host}:{port}/docs"
        timer = threading.Timer(1.0, _open_browser, args=(url,))
        timer.daemon = True
        timer.start()
    uvicorn.run(dashboard, host=host, port=port, log_level="info")


def _settings(
    ctx: typer.Context,
    data_path: Optional[Path],
    special_days_path: Optional[Path],
    **overrides: object,
) -> Settings:
    base: Settings = ctx.obj if isinstance(ctx.obj, Settings) else Settings()
    return base.with_overrides(
        data_file=data_path, special_day_file=special_days_path, **overrides
    )


def _loaded_engine(settings: Settings) -> WorktimeEngine:
    engine = WorktimeEngine(settings)
    problems = engine.load()
    if problems:
        typer.echo(
            f"Note: {len(problems)} problem(s) while loading data; continuing with what loaded.",
            err=True,
        )
    return engine


def _print_live_summary(engine: WorktimeEngine) -> None:
    from .reporting import SummaryPrinter

    print("---")
    SummaryPrinter(engine).print_simple_summary()


def _parse_day(value: str, hint: str) -> date:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError as exc:
        raise typer.BadParameter("expected YYYY-MM-DD", param_hint=hint) from exc


def _open_browser(url: str) -> None:
    try:
        webbrowser.open(url)
    except webbrowser.Error:
        logging.getLogger(__name__).exception("Failed to launch browser for %s", url)
