"""Tests for storage: JSON load/save, stress log entries, daily metrics."""

from __future__ import annotations

import json
import math
import os
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import pytest

from stresslog.models import DailyMetrics, LogRecord
from stresslog.storage import (
    JsonLogStore,
    append_log,
    load_daily,
    load_json,
    load_logs,
    put_daily,
    record_from_entry,
    save_json,
)

JST = timezone(timedelta(hours=9))


@pytest.fixture()
def tmp_json(tmp_path: Path) -> Path:
    return tmp_path / "data.json"


# ---- save_json ----


def test_save_writes_valid_json(tmp_json):
    save_json(tmp_json, {"a": 1, "b": [1, 2, 3]})
    assert json.loads(tmp_json.read_text()) == {"a": 1, "b": [1, 2, 3]}


def test_save_creates_parent_dirs(tmp_path):
    deep = tmp_path / "a" / "b" / "data.json"
    save_json(deep, {"x": 1})
    assert deep.exists()


def test_save_leaves_no_tmp(tmp_json):
    save_json(tmp_json, {"x": 1})
    assert [p.name for p in tmp_json.parent.iterdir()] == ["data.json"]


def test_save_sets_permissions(tmp_json):
    save_json(tmp_json, {})
    assert oct(os.stat(tmp_json).st_mode & 0o777) == "0o600"


# ---- load_json ----


def test_load_missing_creates_empty(tmp_json):
    assert load_json(tmp_json) == {}
    assert tmp_json.exists()


def test_load_empty_file_returns_empty_dict(tmp_json):
    tmp_json.write_text("", encoding="utf-8")
    assert load_json(tmp_json) == {}


def test_load_corrupt_returns_empty_and_backs_up(tmp_json):
    tmp_json.write_text("not valid json {{{{", encoding="utf-8")
    assert load_json(tmp_json) == {}
    assert len(list(tmp_json.parent.glob("*.corrupt-*.json"))) == 1


def test_load_non_dict_json_returns_empty(tmp_json):
    tmp_json.write_text(json.dumps([1, 2, 3]), encoding="utf-8")
    assert load_json(tmp_json) == {}


# ---- stress log entries ----


def test_record_from_entry():
    rec = record_from_entry({"ts": "2024-07-25T09:00:00+09:00", "level": 4})
    assert rec.stress_level == 4.0
    assert rec.timestamp == datetime(2024, 7, 25, 9, 0, tzinfo=JST)


@pytest.mark.parametrize(
    "entry",
    [
        {"ts": "garbage", "level": 4},
        {"ts": "2024-07-25T09:00:00+09:00", "level": "high"},
        {"ts": "2024-07-25T09:00:00+09:00", "level": True},
        {"ts": "2024-07-25T09:00:00+09:00"},
        "not a dict",
    ],
)
def test_record_from_bad_entry_is_none(entry):
    assert record_from_entry(entry) is None


def test_load_logs_keeps_non_finite_levels(tmp_json):
    tmp_json.write_text(
        '{"stress_logs": [{"ts": "2024-07-25T09:00:00+09:00", "level": NaN},'
        ' {"ts": "2024-07-25T10:00:00+09:00", "level": Infinity}]}',
        encoding="utf-8",
    )
    levels = [r.stress_level for r in load_logs(load_json(tmp_json))]
    assert math.isnan(levels[0])
    assert math.isinf(levels[1])


def test_load_logs_skips_bad_entries():
    data = {"stress_logs": [{"ts": "2024-07-25T09:00:00+09:00", "level": 4}, {"ts": "x", "level": 1}]}
    assert len(load_logs(data)) == 1


def test_append_log_persists(tmp_json):
    entry = append_log(tmp_json, LogRecord(datetime(2024, 7, 25, 9, 0, tzinfo=JST), 6.0))
    assert entry == {"ts": "2024-07-25T09:00:00+09:00", "level": 6.0}
    assert load_json(tmp_json)["stress_logs"] == [entry]


def test_json_store_fetch_in_range(tmp_json):
    for hour, level in ((8, 1.0), (12, 5.0), (23, 9.0)):
        append_log(tmp_json, LogRecord(datetime(2024, 7, 25, hour, 0, tzinfo=JST), level))
    append_log(tmp_json, LogRecord(datetime(2024, 7, 26, 0, 0, tzinfo=JST), 7.0))

    store = JsonLogStore(tmp_json)
    got = store.fetch_in_range(datetime(2024, 7, 25, tzinfo=JST), datetime(2024, 7, 26, tzinfo=JST))
    assert sorted(r.stress_level for r in got) == [1.0, 5.0, 9.0]

    got = store.fetch_in_range(
        datetime(2024, 7, 25, 8, 0, tzinfo=JST), datetime(2024, 7, 26, tzinfo=JST), closed="right"
    )
    assert sorted(r.stress_level for r in got) == [5.0, 7.0, 9.0]


# ---- daily metrics ----


def test_put_daily_merges_fields(tmp_json):
    put_daily(tmp_json, DailyMetrics(day=date(2024, 7, 25), sleep_hours=7))
    put_daily(tmp_json, DailyMetrics(day=date(2024, 7, 25), school=8, notes="exam"))
    days = load_daily(load_json(tmp_json))
    assert days == [DailyMetrics(day=date(2024, 7, 25), sleep_hours=7.0, school=8.0, notes="exam")]


def test_load_daily_sorted_and_skips_bad_keys():
    data = {
        "daily_logs": {
            "2024-07-26": {"activity": 3},
            "not-a-date": {"activity": 1},
            "2024-07-25": {"sleep_hours": 6},
        }
    }
    days = load_daily(data)
    assert [d.day for d in days] == [date(2024, 7, 25), date(2024, 7, 26)]
    assert days[1].activity == 3.0
    assert days[1].sleep_hours is None
