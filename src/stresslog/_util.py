"""Clock and number formatting shared by cli.py, storage.py and timeparse.py."""

from __future__ import annotations

import math
from datetime import datetime


def now_local() -> datetime:
    return datetime.now().astimezone()


def clock_label(dt: datetime) -> str:
    """'3:05 PM' style, no leading zero on the hour."""
    return f"{dt.hour % 12 or 12}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def local_instant(ts: str) -> datetime | None:
    """ISO timestamp from the data file as local time; naive values are taken as local."""
    try:
        return datetime.fromisoformat(ts).astimezone()
    except (TypeError, ValueError):
        return None


def fmt_num(value: float | None, spec: str = ".2f") -> str:
    """NaN, inf and None all render as 'No Data'."""
    if value is None or not math.isfinite(value):
        return "No Data"
    return format(value, spec)
