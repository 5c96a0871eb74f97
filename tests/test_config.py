from datetime import date, timedelta
from pathlib import Path

import pytest

from worktime.config import ConfigError, Settings, load_settings


def test_defaults():
    settings = Settings()

    assert settings.idle_timeout == timedelta(minutes=10)
    assert settings.auto_save_interval == timedelta(seconds=30)
    assert settings.weekly_target == timedelta(hours=40)
    assert settings.overtime_carry == timedelta(0)


def test_missing_file_yields_defaults(tmp_path):
    assert load_settings(tmp_path / "worktime.toml") == Settings()


def test_file_values_override_defaults(tmp_path):
    path = tmp_path / "worktime.toml"
    path.write_text(
        "timeout_minutes = 15\n"
        "auto_save_interval_seconds = 60\n"
        "weekly_hours = 38.5\n"
        "overtime_start = 2023-05-01\n"
        "overtime_carry_hours = -2.5\n"
        'data_file = "~/work/worktime.csv"\n',
        encoding="utf-8",
    )

    settings = load_settings(path)

    assert settings.idle_timeout == timedelta(minutes=15)
    assert settings.auto_save_interval == timedelta(seconds=60)
    assert settings.commit_interval == timedelta(seconds=2)
    assert settings.weekly_target == timedelta(hours=38, minutes=30)
    assert settings.overtime_start == date(2023, 5, 1)
    assert settings.overtime_carry == timedelta(hours=-2.5)
    assert settings.data_file == Path("~/work/worktime.csv").expanduser()


def test_overtime_start_accepts_datetime_and_string(tmp_path):
    path = tmp_path / "worktime.toml"
    path.write_text("overtime_start = 2023-05-01T00:00:00+02:00\n", encoding="utf-8")
    assert load_settings(path).overtime_start == date(2023, 5, 1)

    path.write_text('overtime_start = "2023-06-01"\n', encoding="utf-8")
    assert load_settings(path).overtime_start == date(2023, 6, 1)


def test_invalid_value_raises_config_error(tmp_path):
    path = tmp_path / "worktime.toml"
    path.write_text('weekly_hours = "lots"\n', encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_invalid_toml_raises_config_error(tmp_path):
    path = tmp_path / "worktime.toml"
    path.write_text("weekly_hours = \n", encoding="utf-8")

    with pytest.raises(ConfigError):
        load_settings(path)


def test_overrides_skip_none():
    settings = Settings(idle_timeout=timedelta(minutes=5))

    changed = settings.with_overrides(weekly_hours=32.0, data_file=None)
    assert changed.weekly_hours == 32.0
    assert changed.data_file is None
    assert changed.idle_timeout == settings.idle_timeout
