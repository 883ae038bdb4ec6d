from __future__ import annotations

import time

import pytest


@pytest.fixture()
def new_york_tz(monkeypatch):
    """System local time switched to America/New_York for the test."""
    if not hasattr(time, "tzset"):
        pytest.skip("time.tzset is not available on this platform")
    monkeypatch.setenv("TZ", "America/New_York")
    time.tzset()
    yield
    monkeypatch.undo()
    time.tzset()
