"""
JSON-file persistence for stress logs and daily metrics.

Layout:
    {
      "stress_logs": [{"ts": "2024-07-25T09:00:00+09:00", "level": 4.0}, ...],
      "daily_logs": {"2024-07-25": {"sleep_hours": 7, "activity": 3, ...}}
    }
"""

from __future__ import annotations

import json
import os
import tempfile
import time
from datetime import date, datetime
from pathlib import Path
from typing import Any

from ._util import local_instant
from .models import Closed, DailyMetrics, LogRecord, Window

LOGS_KEY = "stress_logs"
DAILY_KEY = "daily_logs"


def _quarantine(path: Path, txt: str) -> None:
    # raw text lands beside the journal as *.corrupt-<epoch>.json
    path.with_suffix(f".corrupt-{int(time.time())}.json").write_text(txt, encoding="utf-8")


def load_json(path: Path) -> dict[str, Any]:
    """
    Read the journal file; always returns a dict.
    Missing or blank files start an empty journal. A file that is not valid
    JSON is quarantined to *.corrupt-<epoch>.json and replaced by an empty one.
    A valid file holding something other than an object reads as empty.
    """
    path = Path(path)
    txt = path.read_text(encoding="utf-8").strip() if path.exists() else ""
    if txt:
        try:
            data = json.loads(txt)
        except json.JSONDecodeError:
            _quarantine(path, txt)
        else:
            return data if isinstance(data, dict) else {}
    save_json(path, {})
    return {}


def save_json(path: Path, data: Any) -> None:
    """Replace the journal atomically; mkstemp makes the new file 0600 from the start."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = json.dumps(data, indent=2, sort_keys=True, ensure_ascii=False) + "\n"

    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except BaseException:
        Path(tmp).unlink(missing_ok=True)
        raise


# -------------------------
# Stress logs
# -------------------------

def record_from_entry(entry: Any) -> LogRecord | None:
    if not isinstance(entry, dict):
        return None
    dt = local_instant(str(entry.get("ts", "")))
    level = entry.get("level")
    if dt is None or isinstance(level, bool) or not isinstance(level, (int, float)):
        return None
    return LogRecord(timestamp=dt, stress_level=float(level))


def entry_from_record(record: LogRecord) -> dict[str, Any]:
    return {"ts": record.timestamp.isoformat(timespec="seconds"), "level": record.stress_level}


def load_logs(data: dict[str, Any]) -> list[LogRecord]:
    out: list[LogRecord] = []
    for entry in data.get(LOGS_KEY, []) or []:
        rec = record_from_entry(entry)
        if rec is not None:
            out.append(rec)
    return out


def append_log(path: Path, record: LogRecord) -> dict[str, Any]:
    data = load_json(path)
    entry = entry_from_record(record)
    data.setdefault(LOGS_KEY, []).append(entry)
    save_json(path, data)
    return entry


class JsonLogStore:
    """LogStore backed by the JSON data file. Re-reads the file on each fetch."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def all(self) -> list[LogRecord]:
        return load_logs(load_json(self.path))

    def fetch_in_range(self, start: datetime, end: datetime, closed: Closed = "left") -> list[LogRecord]:
        w = Window(start, end, closed)
        return [r for r in self.all() if w.contains(r.timestamp)]


# -------------------------
# Daily metrics
# -------------------------

def _opt_float(v: Any) -> float | None:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return None
    return float(v)


def load_daily(data: dict[str, Any]) -> list[DailyMetrics]:
    raw = data.get(DAILY_KEY, {})
    if not isinstance(raw, dict):
        return []
    out: list[DailyMetrics] = []
    for key, entry in raw.items():
        try:
            day = date.fromisoformat(key)
        except ValueError:
            continue
        if not isinstance(entry, dict):
            continue
        out.append(
            DailyMetrics(
                day=day,
                sleep_hours=_opt_float(entry.get("sleep_hours")),
                activity=_opt_float(entry.get("activity")),
                school=_opt_float(entry.get("school")),
                notes=str(entry.get("notes", "")).strip(),
            )
        )
    return sorted(out, key=lambda d: d.day)


def put_daily(path: Path, metrics: DailyMetrics) -> dict[str, Any]:
    """Merge metrics into the day's entry; fields left as None keep their stored value."""
    data = load_json(path)
    daily = data.setdefault(DAILY_KEY, {})
    entry = daily.setdefault(metrics.day.isoformat(), {})
    for field in ("sleep_hours", "activity", "school"):
        v = getattr(metrics, field)
        if v is not None:
            entry[field] = v
    if metrics.notes:
        entry["notes"] = metrics.notes
    save_json(path, data)
    return entry
