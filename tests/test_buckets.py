"""Tests for buckets.by_weekday and buckets.by_time_of_day."""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone

import pytest

from stresslog.buckets import TIME_OF_DAY_LABELS, WEEKDAY_LABELS, by_time_of_day, by_weekday
from stresslog.models import LogRecord


def rec(dt: datetime, level: float) -> LogRecord:
    return LogRecord(timestamp=dt, stress_level=level)


EXAMPLE = [
    rec(datetime(2024, 7, 22, 9, 0), 4),  # Mon
    rec(datetime(2024, 7, 22, 15, 0), 8),  # Mon
    rec(datetime(2024, 7, 23, 10, 0), 2),  # Tue
]


# ---- by_weekday ----


def test_weekday_example():
    buckets = by_weekday(EXAMPLE)
    avgs = {b.label: b.average for b in buckets}
    assert avgs["Mon"] == 6.0
    assert avgs["Tue"] == 2.0
    for label in ("Sun", "Wed", "Thu", "Fri", "Sat"):
        assert math.isnan(avgs[label])


def test_weekday_sunday_first():
    buckets = by_weekday([rec(datetime(2024, 7, 21, 12), 5), rec(datetime(2024, 7, 27, 12), 3)])
    assert buckets[0].label == "Sun" and buckets[0].average == 5
    assert buckets[6].label == "Sat" and buckets[6].average == 3


def test_weekday_counts():
    buckets = by_weekday(EXAMPLE)
    assert [b.count for b in buckets] == [0, 2, 1, 0, 0, 0, 0]


def test_weekday_uses_record_wall_clock():
    # bucketed on the record's own date, not UTC
    tz = timezone(timedelta(hours=9))
    buckets = by_weekday([rec(datetime(2024, 7, 23, 1, 30, tzinfo=tz), 7)])
    assert buckets[2].average == 7  # Tue locally, Mon 16:30 UTC


# ---- by_time_of_day ----


def test_time_of_day_bands():
    records = [
        rec(datetime(2024, 7, 22, 0, 0), 1),
        rec(datetime(2024, 7, 22, 2, 59), 3),
        rec(datetime(2024, 7, 22, 3, 0), 5),
        rec(datetime(2024, 7, 22, 23, 59), 9),
    ]
    buckets = by_time_of_day(records)
    assert buckets[0].average == 2
    assert buckets[1].average == 5
    assert buckets[7].average == 9
    assert all(math.isnan(b.average) for b in buckets[2:7])


def test_time_of_day_example():
    buckets = by_time_of_day(EXAMPLE)
    assert buckets[3].label == "9-12" and buckets[3].average == 3.0
    assert buckets[5].label == "15-18" and buckets[5].average == 8.0


# ---- shape ----


@pytest.mark.parametrize("records", [[], EXAMPLE[:1], EXAMPLE])
def test_fixed_bucket_counts_and_labels(records):
    wd = by_weekday(records)
    tod = by_time_of_day(records)
    assert len(wd) == 7
    assert len(tod) == 8
    assert tuple(b.label for b in wd) == WEEKDAY_LABELS
    assert tuple(b.label for b in tod) == TIME_OF_DAY_LABELS


def test_empty_input_all_nan():
    assert all(math.isnan(b.average) for b in by_weekday([]))
    assert all(math.isnan(b.average) for b in by_time_of_day([]))
