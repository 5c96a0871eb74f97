"""Configuration models and helpers for worktime."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass, replace
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Optional

from .paths import get_config_path, get_data_path, get_special_days_path

logger = logging.getLogger(__name__)


class ConfigError(ValueError):
    """Raised when the configuration file holds an unusable value."""


@dataclass(slots=True)
class Settings:
    """Runtime configuration for recording and overtime reporting."""

    idle_timeout: timedelta = timedelta(minutes=10)
    commit_interval: timedelta = timedelta(seconds=2)
    auto_save_interval: timedelta = timedelta(seconds=30)
    weekly_hours: float = 40.0
    overtime_start: Optional[date] = None
    overtime_carry_hours: float = 0.0
    data_file: Optional[Path] = None
    special_day_file: Optional[Path] = None

    @property
    def weekly_target(self) -> timedelta:
        return timedelta(hours=self.weekly_hours)

    @property
    def overtime_carry(self) -> timedelta:
        return timedelta(hours=self.overtime_carry_hours)

    @property
    def resolved_data_file(self) -> Path:
        return self.data_file or get_data_path()

    @property
    def resolved_special_day_file(self) -> Path:
        return self.special_day_file or get_special_days_path()

    def with_overrides(self, **overrides: Any) -> "Settings":
        """Return a copy with every non-``None`` override applied."""
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


_SECONDS_KEYS = {
    "commit_interval_seconds": "commit_interval",
    "auto_save_interval_seconds": "auto_save_interval",
}


def load_settings(path: Optional[Path] = None) -> Settings:
    """Read ``worktime.toml``; a missing file yields the defaults."""
    config_path = Path(path) if path else get_config_path()
    if not config_path.exists():
        logger.debug("No configuration at %s; using defaults.", config_path)
        return Settings()
    with config_path.open("rb") as handle:
        try:
            raw = tomllib.load(handle)
        except tomllib.TOMLDecodeError as exc:
            raise ConfigError(f"{config_path}: {exc}") from exc
    return settings_from_mapping(raw, source=str(config_path))


def settings_from_mapping(raw: dict[str, Any], source: str = "<config>") -> Settings:
    values: dict[str, Any] = {}
    try:
        if "timeout_minutes" in raw:
            values["idle_timeout"] = timedelta(minutes=float(raw["timeout_minutes"]))
        for key, attr in _SECONDS_KEYS.items():
            if key in raw:
                values[attr] = timedelta(seconds=float(raw[key]))
        if "weekly_hours" in raw:
            values["weekly_hours"] = float(raw["weekly_hours"])
        if "overtime_carry_hours" in raw:
            values["overtime_carry_hours"] = float(raw["overtime_carry_hours"])
        if "overtime_start" in raw:
            values["overtime_start"] = _as_date(raw["overtime_start"])
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{source}: {exc}") from exc
    for key in ("data_file", "special_day_file"):
        if raw.get(key):
            values[key] = Path(str(raw[key])).expanduser()

    unknown = set(raw) - {
        "timeout_minutes",
        "weekly_hours",
        "overtime_carry_hours",
        "overtime_start",
        "data_file",
        "special_day_file",
        *_SECONDS_KEYS,
    }
    if unknown:
        logger.warning("Ignoring unknown configuration keys in %s: %s", source, sorted(unknown))
    return Settings(**values)


def _as_date(value: Any) -> date:
    # TOML gives dates and datetimes natively; strings are accepted too.
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value))
