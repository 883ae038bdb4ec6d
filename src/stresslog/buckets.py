from __future__ import annotations

from datetime import datetime
from typing import Callable, Sequence

from .aggregate import mean
from .models import Bucket, LogRecord

WEEKDAY_LABELS = ("Sun", "Mon", "Tue", "Wed", "Thu", "Fri", "Sat")
TIME_OF_DAY_LABELS = ("0-3", "3-6", "6-9", "9-12", "12-15", "15-18", "18-21", "21-24")


def _weekday_index(dt: datetime) -> int:
    # isoweekday: Mon=1 .. Sun=7 -> Sun=0 .. Sat=6
    return dt.isoweekday() % 7


def _band_index(dt: datetime) -> int:
    return dt.hour // 3


def _bucketize(
    records: Sequence[LogRecord],
    labels: tuple[str, ...],
    index_of: Callable[[datetime], int],
) -> tuple[Bucket, ...]:
    groups: list[list[LogRecord]] = [[] for _ in labels]
    for r in records:
        groups[index_of(r.timestamp)].append(r)
    return tuple(Bucket(label, mean(g), len(g)) for label, g in zip(labels, groups))


def by_weekday(records: Sequence[LogRecord]) -> tuple[Bucket, ...]:
    """Seven buckets Sun..Sat, averaged on each record's own wall-clock date."""
    return _bucketize(records, WEEKDAY_LABELS, _weekday_index)


def by_time_of_day(records: Sequence[LogRecord]) -> tuple[Bucket, ...]:
    """Eight three-hour bands 0-3 .. 21-24 of the local hour."""
    return _bucketize(records, TIME_OF_DAY_LABELS, _band_index)
