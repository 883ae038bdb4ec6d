from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta, tzinfo
from typing import Callable

from .models import ComparisonWindow, Granularity, Window

Midnight = Callable[[date], datetime]


def start_of_day(dt: datetime) -> datetime:
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def _shift_months(d: date, months: int) -> date:
    # calendar arithmetic; day clamps to the target month's length (Mar 31 -> Feb 28)
    idx = d.year * 12 + (d.month - 1) + months
    year, month = divmod(idx, 12)
    month += 1
    return d.replace(year=year, month=month, day=min(d.day, calendar.monthrange(year, month)[1]))


def _window_pair(day: date, g: Granularity, midnight: Midnight) -> ComparisonWindow:
    """
    Boundaries are picked as calendar days first and only then turned into
    instants, so each one is a real midnight even when a DST change falls
    inside the span.
    """
    one = timedelta(days=1)
    if g is Granularity.DAY:
        bounds, closed = (day - one, day, day + one), "left"
    elif g is Granularity.WEEK:
        start = day - 6 * one
        bounds, closed = (start - 7 * one, start, day + one), "left"
    else:
        start = _shift_months(day, -1)
        bounds, closed = (_shift_months(start, -1), start, day), "right"

    before, split, end = (midnight(d) for d in bounds)
    return ComparisonWindow(
        granularity=g,
        current=Window(split, end, closed),
        previous=Window(before, split, closed),
    )


def compute_window(
    reference: date | datetime,
    granularity: Granularity | str,
    tz: tzinfo | None = None,
) -> ComparisonWindow:
    """
    Current + previous window for a reference day (sod = its midnight).

    day:   [sod, sod+1d)            previous [sod-1d, sod)
    week:  [sod-6d, sod+1d)         previous [sod-13d, sod-6d)
    month: (sod-1mo, sod]           previous (start-1mo, start]

    Month windows are closed on the right, so a record stamped exactly on
    a month window's start belongs to the previous window.

    An aware datetime reference lends its tzinfo to every boundary; a plain
    date uses `tz` (naive when None). Pass a zoneinfo.ZoneInfo to get
    DST-correct midnights.
    """
    if isinstance(reference, datetime):
        day, tz = reference.date(), reference.tzinfo
    else:
        day = reference
    return _window_pair(day, Granularity(granularity), lambda d: datetime.combine(d, time(), tzinfo=tz))


def compute_local_window(day: date, granularity: Granularity | str) -> ComparisonWindow:
    """Same windows, each boundary at the system-local midnight of its own date."""
    return _window_pair(day, Granularity(granularity), lambda d: datetime.combine(d, time()).astimezone())
