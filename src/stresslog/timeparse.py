from __future__ import annotations

import re
from datetime import date, datetime, timedelta

_RELATIVE = re.compile(r"(\d+)\s*(day|days|hour|hours|minute|minutes)\s*ago")
_KEYWORD = re.compile(r"(today|yesterday|tomorrow)(?:\s+(.+))?")

_DATE_TIME_FORMATS = (
    "%Y-%m-%d %I:%M%p",
    "%Y-%m-%d %I:%M %p",
    "%Y-%m-%d %I%p",
    "%Y-%m-%d %H:%M",
    "%Y/%m/%d %I:%M%p",
    "%Y/%m/%d %I:%M %p",
    "%Y/%m/%d %H:%M",
)
_TIME_FORMATS = ("%I:%M%p", "%I:%M %p", "%I%p", "%H:%M")

_DAY_OFFSETS = {"today": 0, "yesterday": -1, "tomorrow": 1}


def _with_tz(dt: datetime, now: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=now.tzinfo)
    return dt.astimezone(now.tzinfo)


def parse_when(value: str | None, now: datetime) -> datetime:
    """
    Parse flexible user time relative to `now` (an aware datetime).
    Accepts:
      - None / blank -> now
      - ISO 8601 (naive assumed in now's timezone)
      - "7:34am", "7:34 am", "19:34", "7am" (on now's date)
      - "2024-07-25 7:34am", "2024-07-25 19:34"
      - "3 days ago", "2 hours ago", "15 minutes ago"
      - "today 14:30", "yesterday 9am", "tomorrow 7pm"
    Microseconds are dropped.
    """
    if not value or not value.strip():
        return now.replace(microsecond=0)

    raw = value.strip()
    s = raw.lower()

    try:
        return _with_tz(datetime.fromisoformat(raw), now).replace(microsecond=0)
    except ValueError:
        pass

    m = _RELATIVE.fullmatch(s)
    if m:
        n, unit = int(m.group(1)), m.group(2)
        if unit.startswith("day"):
            delta = timedelta(days=n)
        elif unit.startswith("hour"):
            delta = timedelta(hours=n)
        else:
            delta = timedelta(minutes=n)
        return (now - delta).replace(microsecond=0)

    m = _KEYWORD.fullmatch(s)
    if m and m.group(2):
        base = now + timedelta(days=_DAY_OFFSETS[m.group(1)])
        try:
            return _time_on(m.group(2), base)
        except ValueError:
            pass

    for fmt in _DATE_TIME_FORMATS:
        try:
            return datetime.strptime(raw, fmt).replace(tzinfo=now.tzinfo)
        except ValueError:
            continue

    try:
        return _time_on(raw, now)
    except ValueError:
        pass

    raise SystemExit(
        f"Could not parse time {value!r}. Try ISO like '2024-07-25T07:34:00+09:00' "
        f"or '2024-07-25 7:34am' or '7:34am' or 'yesterday 9am' or '3 days ago'."
    )


def parse_day(value: str | None, now: datetime) -> date:
    """
    Parse a calendar day: None -> today, "YYYY-MM-DD", "today",
    "yesterday", "tomorrow", "N days ago".
    """
    if not value or not value.strip():
        return now.date()

    s = value.strip().lower()
    if s in _DAY_OFFSETS:
        return (now + timedelta(days=_DAY_OFFSETS[s])).date()

    m = re.fullmatch(r"(\d+)\s*days?\s*ago", s)
    if m:
        return (now - timedelta(days=int(m.group(1)))).date()

    for fmt in ("%Y-%m-%d", "%Y/%m/%d"):
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue

    raise SystemExit(f"Could not parse date {value!r}. Try '2024-07-25', 'yesterday' or '3 days ago'.")


def _time_on(time_str: str, base: datetime) -> datetime:
    """Apply a time like '9am', '7:34am' or '14:30' to base's date."""
    s = time_str.strip().lower()
    for fmt in _TIME_FORMATS:
        try:
            t = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return base.replace(hour=t.hour, minute=t.minute, second=0, microsecond=0)
    raise ValueError(f"Could not parse time-only value: {time_str!r}")
