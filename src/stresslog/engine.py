from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, tzinfo
from typing import Iterable, Protocol

from .aggregate import sort_records, summarize
from .buckets import by_time_of_day, by_weekday
from .models import AggregateResult, Bucket, Closed, ComparisonWindow, Granularity, LogRecord, Window
from .windows import compute_window


class LogStore(Protocol):
    def fetch_in_range(self, start: datetime, end: datetime, closed: Closed = "left") -> list[LogRecord]:
        ...


class MemoryLogStore:
    """LogStore over an already-materialized list of records."""

    def __init__(self, records: Iterable[LogRecord] = ()):
        self._records = tuple(records)

    def fetch_in_range(self, start: datetime, end: datetime, closed: Closed = "left") -> list[LogRecord]:
        w = Window(start, end, closed)
        return [r for r in self._records if w.contains(r.timestamp)]


@dataclass(frozen=True)
class StressReport:
    window: ComparisonWindow
    current_logs: tuple[LogRecord, ...]
    previous_logs: tuple[LogRecord, ...]
    current: AggregateResult
    previous: AggregateResult
    by_weekday: tuple[Bucket, ...]
    by_time_of_day: tuple[Bucket, ...]


def _fetch(store: LogStore, w: Window) -> tuple[LogRecord, ...]:
    return tuple(sort_records(store.fetch_in_range(w.start, w.end, w.closed)))


def analyze(
    store: LogStore,
    reference: date | datetime,
    granularity: Granularity | str,
    tz: tzinfo | None = None,
) -> StressReport:
    return analyze_window(store, compute_window(reference, granularity, tz))


def analyze_window(store: LogStore, window: ComparisonWindow) -> StressReport:
    current = _fetch(store, window.current)
    previous = _fetch(store, window.previous)

    return StressReport(
        window=window,
        current_logs=current,
        previous_logs=previous,
        current=summarize(current, previous),
        # nothing older is fetched, so the previous period has no trend
        previous=summarize(previous, ()),
        by_weekday=by_weekday(current),
        by_time_of_day=by_time_of_day(current),
    )
