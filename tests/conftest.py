from __future__ import annotations

from zoneinfo import ZoneInfo

import pytest

from worktime import clock

BERLIN = ZoneInfo("Europe/Berlin")


@pytest.fixture(autouse=True)
def local_zone(monkeypatch: pytest.MonkeyPatch) -> ZoneInfo:
    monkeypatch.setattr(clock, "_local_zone", BERLIN)
    return BERLIN
