"""
Pure statistics over a slice of stress logs.

Empty input is not an error: means and percentages come back as NaN and
extrema as None, and callers render those as "No Data".
"""

from __future__ import annotations

import math
from typing import Iterable, Sequence

from .models import AggregateResult, DailyMetrics, Extremum, LogRecord


def sort_records(records: Iterable[LogRecord]) -> list[LogRecord]:
    return sorted(records, key=lambda r: r.timestamp)


def mean(records: Sequence[LogRecord]) -> float:
    if not records:
        return math.nan
    return sum(r.stress_level for r in records) / len(records)


def _ratio_percent(a: float, b: float) -> float:
    if math.isnan(a) or math.isnan(b):
        return math.nan
    if b == 0:
        # float division would raise; report it the way IEEE would
        return math.nan if a == 0 else math.copysign(math.inf, a)
    return a / b * 100


def trend(current: Sequence[LogRecord], previous: Sequence[LogRecord]) -> float:
    """mean(current) / mean(previous) * 100; NaN when either side has no data."""
    return _ratio_percent(mean(current), mean(previous))


def extremum(records: Sequence[LogRecord], kind: Extremum | str) -> LogRecord | None:
    """
    Record with the highest (max) or lowest (min) stress level.
    Ties go to the earliest timestamp. None for empty input.
    """
    if not records:
        return None
    ordered = sort_records(records)
    pick = max if Extremum(kind) is Extremum.MAX else min
    # max/min keep the first of equal keys, so time order decides ties
    return pick(ordered, key=lambda r: r.stress_level)


def summarize(current: Sequence[LogRecord], previous: Sequence[LogRecord]) -> AggregateResult:
    return AggregateResult(
        mean=mean(current),
        trend_percent=trend(current, previous),
        max=extremum(current, Extremum.MAX),
        min=extremum(current, Extremum.MIN),
    )


def metric_means(days: Sequence[DailyMetrics]) -> dict[str, float]:
    out: dict[str, float] = {}
    for field in ("sleep_hours", "activity", "school"):
        vals = [getattr(d, field) for d in days if getattr(d, field) is not None]
        out[field] = (sum(vals) / len(vals)) if vals else math.nan
    return out
