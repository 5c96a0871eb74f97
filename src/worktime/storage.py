"""CSV persistence for work intervals and special days."""

from __future__ import annotations

import csv
import logging
import os
import tempfile
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Generic, Iterable, TypeVar

from .clock import to_local
from .models import SpecialDay, SpecialDayKind, WorkInterval

logger = logging.getLogger(__name__)

INTERVAL_FIELDS = ("start", "end", "comments")
SPECIAL_DAY_FIELDS = ("day", "day_type")

T = TypeVar("T")


@dataclass(slots=True)
class LoadResult(Generic[T]):
    """Records read from a file plus whatever could not be read."""

    records: list[T] = field(default_factory=list)
    problems: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.problems


def read_intervals(path: Path) -> LoadResult[WorkInterval]:
    return _read(Path(path), INTERVAL_FIELDS, _parse_interval)


def read_special_days(path: Path) -> LoadResult[SpecialDay]:
    return _read(Path(path), SPECIAL_DAY_FIELDS, _parse_special_day)


def write_intervals(path: Path, intervals: Iterable[WorkInterval]) -> None:
    """Replace ``path`` with the given intervals in one atomic rename."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", newline="", encoding="utf-8") as handle:
            writer = csv.writer(handle)
            writer.writerow(INTERVAL_FIELDS)
            count = 0
            for entry in intervals:
                writer.writerow(
                    (entry.start.isoformat(), entry.end.isoformat(), entry.note)
                )
                count += 1
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    logger.debug("Wrote %d intervals to %s.", count, path)


def _read(path: Path, required: tuple[str, ...], parse) -> LoadResult:
    result: LoadResult = LoadResult()
    try:
        handle = path.open(newline="", encoding="utf-8")
    except OSError as exc:
        result.problems.append(f"{path}: {exc.strerror or exc}")
        return result

    with handle:
        reader = csv.DictReader(handle)
        if not reader.fieldnames:
            return result
        missing = [name for name in required if name not in reader.fieldnames]
        if missing:
            result.problems.append(f"{path}: missing columns {missing}")
            return result
        for row_number, row in enumerate(reader, start=2):
            try:
                result.records.append(parse(row))
            except (TypeError, ValueError) as exc:
                result.problems.append(f"{path}: row {row_number}: {exc}")
    return result


def _parse_timestamp(value: str | None) -> datetime:
    if not value:
        raise ValueError("missing timestamp")
    return to_local(datetime.fromisoformat(value.strip()))


def _parse_interval(row: dict) -> WorkInterval:
    return WorkInterval(
        start=_parse_timestamp(row.get("start")),
        end=_parse_timestamp(row.get("end")),
        note=row.get("comments") or "",
    )


def _parse_special_day(row: dict) -> SpecialDay:
    raw_day = (row.get("day") or "").strip()
    raw_kind = (row.get("day_type") or "").strip()
    try:
        kind = SpecialDayKind(raw_kind)
    except ValueError:
        raise ValueError(f"unknown day type {raw_kind!r}") from None
    return SpecialDay(date=date.fromisoformat(raw_day), kind=kind)
