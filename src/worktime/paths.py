"""Helpers for locating application directories."""

from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs


APP_NAME = "worktime"
APP_AUTHOR = "worktime"


def _dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=APP_AUTHOR, roaming=True)


def get_data_dir() -> Path:
    """Return the base directory for persistent data."""
    path = Path(_dirs().user_data_path)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_config_path() -> Path:
    return Path(_dirs().user_config_path) / "worktime.toml"


def get_data_path() -> Path:
    return get_data_dir() / "worktime.csv"


def get_special_days_path() -> Path:
    return get_data_dir() / "special_days.csv"


def get_lock_path(data_path: Path) -> Path:
    return data_path.with_name(data_path.name + ".lock")
