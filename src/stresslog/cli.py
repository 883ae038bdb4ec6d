from __future__ import annotations

import argparse
import math
import stat
from datetime import datetime, time, timedelta
from typing import Any, Sequence

from ._util import clock_label, fmt_num, now_local
from .aggregate import metric_means
from .config import locate, require_private
from .engine import StressReport, analyze_window
from .models import Bucket, DailyMetrics, Granularity, LogRecord, Window
from .storage import (
    DAILY_KEY,
    LOGS_KEY,
    JsonLogStore,
    append_log,
    load_daily,
    load_json,
    put_daily,
    record_from_entry,
    save_json,
)
from .timeparse import parse_day, parse_when
from .windows import compute_local_window

PERIOD_IN_PAST = {
    Granularity.DAY: "yesterday",
    Granularity.WEEK: "last week",
    Granularity.MONTH: "last month",
}


# -------------------------
# Formatting helpers
# -------------------------

def _fmt_level(v: float) -> str:
    return f"{v:g}"


def _sparkline(values: list[float], vmin: float = 0.0, vmax: float = 10.0) -> str:
    """One block per value on the 0-10 scale; NaN/inf levels show as '·'."""
    if not values:
        return ""
    blocks = "▁▂▃▄▅▆▇█"
    span = max(1e-9, vmax - vmin)
    out = []
    for v in values:
        if not math.isfinite(v):
            out.append("·")
            continue
        x = (v - vmin) / span
        idx = int(round(x * (len(blocks) - 1)))
        idx = max(0, min(len(blocks) - 1, idx))
        out.append(blocks[idx])
    return "".join(out)


def _window_label(w: Window) -> str:
    """Calendar days covered by a window, both ends shown inclusive."""
    if w.closed == "right":
        first, last = w.start.date(), w.end.date()
    else:
        first, last = w.start.date(), (w.end - timedelta(days=1)).date()
    if first == last:
        return first.isoformat()
    return f"{first.isoformat()} → {last.isoformat()}"


def _fmt_extremum(rec: LogRecord | None, g: Granularity) -> str:
    if rec is None or not math.isfinite(rec.stress_level):
        return "No Data"
    if g is Granularity.DAY:
        return f"{rec.stress_level:.2f} at {clock_label(rec.timestamp)}"
    return f"{rec.stress_level:.2f} on {rec.timestamp.strftime('%a %d %b')}"


def _fmt_trend(pct: float, g: Granularity) -> str:
    if not math.isfinite(pct):
        return "No Data"
    return f"{pct:.2f}% compared to {PERIOD_IN_PAST[g]}"


def _print_buckets(title: str, buckets: Sequence[Bucket]) -> None:
    print(f"\n[{title}]")
    width = max(len(b.label) for b in buckets)
    for b in buckets:
        if not math.isfinite(b.average):
            print(f"{b.label:>{width}}: No Data")
            continue
        bar = "▇" * max(0, min(int(round(b.average)), 30))
        print(f"{b.label:>{width}}: {b.average:5.2f} {bar} ({b.count})")


def _print_report(report: StressReport, daily: list[DailyMetrics]) -> None:
    g = report.window.granularity
    cur = report.current

    print(f"=== Stress Stats ({g.value}: {_window_label(report.window.current)}) ===")
    print(f"- compared with: {_window_label(report.window.previous)}")
    print(f"- entries: {len(report.current_logs)} (previous: {len(report.previous_logs)})")
    if report.current_logs:
        print(f"- sparkline: {_sparkline([r.stress_level for r in report.current_logs])}")
    print(f"- average: {fmt_num(cur.mean)}")
    print(f"- previous average: {fmt_num(report.previous.mean)}")
    print(f"- trend: {_fmt_trend(cur.trend_percent, g)}")
    print(f"- maximum: {_fmt_extremum(cur.max, g)}")
    print(f"- minimum: {_fmt_extremum(cur.min, g)}")

    if g is Granularity.DAY:
        _print_buckets("Average stress by time of day", report.by_time_of_day)
    else:
        _print_buckets("Average stress by day of the week", report.by_weekday)

    w = report.window.current
    in_window = [
        d for d in daily
        if w.contains(datetime.combine(d.day, time()).astimezone())
    ]
    if in_window:
        means = metric_means(in_window)
        print(f"\n[Daily metrics ({len(in_window)} days)]")
        print(f"- sleep: {fmt_num(means['sleep_hours'])} h")
        print(f"- activity: {fmt_num(means['activity'])}/10")
        print(f"- school: {fmt_num(means['school'])}/10")


def _check_scale(value: float | None, arg_name: str) -> float | None:
    if value is None:
        return None
    if not (0 <= value <= 10):
        raise SystemExit(f"{arg_name} must be between 0 and 10")
    return value


# -------------------------
# LOG commands
# -------------------------

def cmd_log_add(args: argparse.Namespace) -> None:
    level = _check_scale(args.level, "--level")
    when = parse_when(args.time, now_local())

    entry = append_log(args.data_path, LogRecord(timestamp=when, stress_level=float(level)))
    print(f"📝 Logged stress {_fmt_level(entry['level'])}/10 @ {entry['ts']}")


def cmd_log_list(args: argparse.Namespace) -> None:
    data = load_json(args.data_path)
    entries = data.get(LOGS_KEY, [])

    if not entries:
        print("No stress entries yet.")
        return

    print("=== Stress Log (newest first) ===")
    for e in list(reversed(entries))[: args.limit]:
        rec = record_from_entry(e)
        if rec is None:
            print(f"{e!r} (unreadable)")
            continue
        ts = rec.timestamp
        print(f"{ts.date().isoformat()} {clock_label(ts)} — {_fmt_level(rec.stress_level)}/10")


# -------------------------
# DAILY commands
# -------------------------

def cmd_daily_add(args: argparse.Namespace) -> None:
    now = now_local()
    metrics = DailyMetrics(
        day=parse_day(args.date, now),
        sleep_hours=_check_scale(args.sleep, "--sleep"),
        activity=_check_scale(args.activity, "--activity"),
        school=_check_scale(args.school, "--school"),
        notes=(args.notes or "").strip(),
    )
    if metrics.sleep_hours is None and metrics.activity is None and metrics.school is None and not metrics.notes:
        raise SystemExit("Nothing to log: pass at least one of --sleep, --activity, --school, --notes")

    entry = put_daily(args.data_path, metrics)
    fields = ", ".join(f"{k}={v}" for k, v in sorted(entry.items()) if k != "notes")
    print(f"📒 Daily log {metrics.day.isoformat()}: {fields or '(notes only)'}")


def cmd_daily_list(args: argparse.Namespace) -> None:
    days = load_daily(load_json(args.data_path))
    if not days:
        print("No daily logs yet.")
        return

    print("=== Daily Log (newest first) ===")
    for d in list(reversed(days))[: args.limit]:
        parts = [
            f"sleep={fmt_num(d.sleep_hours, 'g')}h" if d.sleep_hours is not None else "sleep=—",
            f"activity={fmt_num(d.activity, 'g')}" if d.activity is not None else "activity=—",
            f"school={fmt_num(d.school, 'g')}" if d.school is not None else "school=—",
        ]
        line = f"{d.day.isoformat()} — {' '.join(parts)}"
        if d.notes:
            line += f" ({d.notes})"
        print(line)


# -------------------------
# Stats
# -------------------------

def cmd_stats(args: argparse.Namespace) -> None:
    now = now_local()
    window = compute_local_window(parse_day(args.date, now), args.period)

    report = analyze_window(JsonLogStore(args.data_path), window)
    _print_report(report, load_daily(load_json(args.data_path)))


# -------------------------
# Core commands
# -------------------------

def cmd_init(args: argparse.Namespace) -> None:
    data = load_json(args.data_path)
    data.setdefault(LOGS_KEY, [])
    data.setdefault(DAILY_KEY, {})
    save_json(args.data_path, data)
    print(f"✅ Initialized data file: {args.data_path}")


def cmd_where(args: argparse.Namespace) -> None:
    loc = args.location
    print(loc.path)
    print(f"↳ {loc.describe()}")
    if loc.repo_root is not None:
        print(f"⚠️ inside git repo {loc.repo_root} (allowed by --allow-repo-data-path)")


def cmd_doctor(args: argparse.Namespace) -> None:
    print("=== StressLog Doctor ===")

    require_private(args.location, args.allow_repo_data_path)
    print(f"✅ Journal location: {args.location.path} ({args.location.describe()})")

    data = load_json(args.data_path)
    print("✅ JSON readable: OK")

    entries: list[Any] = data.get(LOGS_KEY, []) or []
    records = [r for r in (record_from_entry(e) for e in entries) if r is not None]
    bad = len(entries) - len(records)
    line = f"📝 Stress entries: {len(entries)}"
    if bad:
        line += f" ({bad} unreadable, ignored in stats)"
    print(line)

    out_of_scale = [r for r in records if not (0 <= r.stress_level <= 10)]
    if out_of_scale:
        print(f"⚠️ {len(out_of_scale)} entries outside 0–10 (still counted)")

    try:
        perms = stat.S_IMODE(args.data_path.stat().st_mode)
        print(f"🔐 File permissions: {oct(perms)} (target 0o600)")
    except FileNotFoundError:
        print("⚠️ Data file missing (run `stresslog init`)")

    print("=== Done ===")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="stresslog", description="Stress journal + trend stats")
    p.add_argument("--data", default=None, help="Path to journal JSON (overrides STRESSLOG_DATA/default)")
    p.add_argument("--profile", default=None, help="Profile name (e.g. dev/test)")
    p.add_argument("--allow-repo-data-path", action="store_true", help="Override safety guard (not recommended)")

    sub = p.add_subparsers(dest="cmd", required=True)
    sub.add_parser("init", help="Initialize data store safely").set_defaults(func=cmd_init)
    sub.add_parser("where", help="Show which data file is active and why").set_defaults(func=cmd_where)
    sub.add_parser("doctor", help="Run safety + health checks").set_defaults(func=cmd_doctor)

    # ---- log ----
    log = sub.add_parser("log", help="Stress level logging")
    log_sub = log.add_subparsers(dest="log_cmd", required=True)

    log_add = log_sub.add_parser("add", help="Add stress entry (0–10)")
    log_add.add_argument("--level", type=float, required=True, help="Stress level 0–10")
    log_add.add_argument("--time", default=None, help="ISO, human, or relative (e.g. today 9am, 3 days ago)")
    log_add.set_defaults(func=cmd_log_add)

    log_list = log_sub.add_parser("list", help="List stress entries")
    log_list.add_argument("--limit", type=int, default=50)
    log_list.set_defaults(func=cmd_log_list)

    # ---- daily ----
    daily = sub.add_parser("daily", help="Daily sleep / activity / school log")
    daily_sub = daily.add_subparsers(dest="daily_cmd", required=True)

    daily_add = daily_sub.add_parser("add", help="Add or update a day's metrics")
    daily_add.add_argument("--date", default=None, help="YYYY-MM-DD, today, yesterday, or 'N days ago'")
    daily_add.add_argument("--sleep", type=float, default=None, help="Sleep in hours (0–10, 10 = 10h+)")
    daily_add.add_argument("--activity", type=float, default=None, help="Activity 0–10")
    daily_add.add_argument("--school", type=float, default=None, help="School load 0–10")
    daily_add.add_argument("--notes", default=None)
    daily_add.set_defaults(func=cmd_daily_add)

    daily_list = daily_sub.add_parser("list", help="List daily logs")
    daily_list.add_argument("--limit", type=int, default=31)
    daily_list.set_defaults(func=cmd_daily_list)

    # ---- stats ----
    stats = sub.add_parser("stats", help="Average, trend, max/min and bucket charts for a period")
    stats.add_argument("--period", choices=[g.value for g in Granularity], default="week")
    stats.add_argument("--date", default=None, help="Reference day (default today)")
    stats.set_defaults(func=cmd_stats)

    return p


def main(argv=None) -> None:
    args = build_parser().parse_args(argv)
    args.location = locate(args.data, args.profile)
    args.data_path = args.location.path

    require_private(args.location, args.allow_repo_data_path)

    args.func(args)


if __name__ == "__main__":
    main()
