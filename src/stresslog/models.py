"""Value types shared by the window, aggregate and bucket helpers."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from enum import Enum
from typing import Literal

Closed = Literal["left", "right"]


class Granularity(str, Enum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


class Extremum(str, Enum):
    MAX = "max"
    MIN = "min"


@dataclass(frozen=True)
class LogRecord:
    timestamp: datetime
    stress_level: float


@dataclass(frozen=True)
class Window:
    """
    Time interval used to pick log records.
    closed="left"  -> start <= t < end  (day, week)
    closed="right" -> start < t <= end  (month)
    """

    start: datetime
    end: datetime
    closed: Closed = "left"

    def __post_init__(self) -> None:
        if self.closed not in ("left", "right"):
            raise ValueError(f"closed must be 'left' or 'right', got {self.closed!r}")

    def contains(self, t: datetime) -> bool:
        if self.closed == "right":
            return self.start < t <= self.end
        return self.start <= t < self.end

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: Window) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class ComparisonWindow:
    granularity: Granularity
    current: Window
    previous: Window


@dataclass(frozen=True)
class AggregateResult:
    mean: float
    trend_percent: float
    max: LogRecord | None
    min: LogRecord | None

    @property
    def has_data(self) -> bool:
        return not math.isnan(self.mean)


@dataclass(frozen=True)
class Bucket:
    label: str
    average: float
    count: int


@dataclass(frozen=True)
class DailyMetrics:
    # 0..10 sliders; sleep in hours
    day: date
    sleep_hours: float | None = None
    activity: float | None = None
    school: float | None = None
    notes: str = ""
