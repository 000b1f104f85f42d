"""
Export parsed timetable data to ICS, CSV, and JSON.
"""
from __future__ import annotations

import csv
import hashlib
import json
from dataclasses import fields
from datetime import date, datetime, timedelta, timezone
from pathlib import Path

import icalendar
import pytz

from .model import ParsedResult, TimetableEntry

# Calendar timezone; the portal's institutions are in East Africa
DEFAULT_TIMEZONE = "Africa/Nairobi"

_WEEKDAY_INDEX = {
    "MONDAY": 0,
    "TUESDAY": 1,
    "WEDNESDAY": 2,
    "THURSDAY": 3,
    "FRIDAY": 4,
    "SATURDAY": 5,
    "SUNDAY": 6,
}


def _first_date_for_weekday(start: date, day: str) -> date:
    """First date on/after start that falls on day ('TUESDAY')."""
    target_idx = _WEEKDAY_INDEX.get(day)
    if target_idx is None:
        return start
    offset = (target_idx - start.weekday()) % 7
    return start + timedelta(days=offset)


def _parse_time(date_str: str, time_str: str) -> datetime:
    """Combine '2025-12-15' and '09:00:00' (or '09:00')."""
    if not date_str or not time_str:
        raise ValueError("Missing date or time")
    if len(time_str) == 5 and ":" in time_str:
        time_str = time_str + ":00"
    return datetime.strptime(f"{date_str.strip()} {time_str.strip()}", "%Y-%m-%d %H:%M:%S")


def _build_event(
    entry: TimetableEntry,
    zone,
    term_start: str | None,
    term_end: str | None,
) -> icalendar.Event | None:
    """One VEVENT for an entry, or None when it lacks a date or time to place it."""
    summary = f"{entry.unit_code} {entry.session_type.value}"
    event = icalendar.Event()

    if entry.exam_date:
        event_date = entry.exam_date
        if entry.time_start and entry.time_end:
            start = _parse_time(event_date, entry.time_start)
            end = _parse_time(event_date, entry.time_end)
            event.add("dtstart", zone.localize(start))
            event.add("dtend", zone.localize(end))
            stamp = start.isoformat()
        else:
            day = date.fromisoformat(event_date)
            event.add("dtstart", day)
            event.add("dtend", day + timedelta(days=1))
            stamp = day.isoformat()
    else:
        if not (term_start and entry.day in _WEEKDAY_INDEX and entry.time_start and entry.time_end):
            return None
        event_date = _first_date_for_weekday(date.fromisoformat(term_start), entry.day).isoformat()
        start = _parse_time(event_date, entry.time_start)
        end = _parse_time(event_date, entry.time_end)
        event.add("dtstart", zone.localize(start))
        event.add("dtend", zone.localize(end))
        stamp = start.isoformat()
        if term_end:
            until_dt = datetime.strptime(term_end, "%Y-%m-%d").replace(
                hour=23, minute=59, second=59, tzinfo=timezone.utc
            )
            event.add("rrule", {"freq": "weekly", "until": until_dt})

    # Deterministic UID
    uid_string = f"{summary}-{event_date}-{stamp}-{entry.venue or ''}"
    uid_hash = hashlib.md5(uid_string.encode("utf-8")).hexdigest()
    event.add("uid", f"{uid_hash}@timetable-ingest")

    event.add("summary", summary)
    event.add("description", f"Unit: {entry.unit_name}\nLecturer: {entry.lecturer or ''}")
    event.add("location", entry.venue or "")
    event.add("dtstamp", datetime.now(timezone.utc))
    return event


def export_ics(
    result: ParsedResult,
    out_path: str | Path,
    term_start: str | None = None,
    term_end: str | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> int:
    """
    Export to iCalendar. Exams become one-off events; weekly classes start on
    the first matching weekday on/after term_start and repeat until term_end.
    Returns the number of events written.
    """
    cal = icalendar.Calendar()
    cal.add("prodid", "-//Timetable Ingest//EN")
    cal.add("version", "2.0")
    cal.add("calscale", "GREGORIAN")
    cal.add("x-wr-calname", "Timetable")
    cal.add("x-wr-timezone", tz)

    zone = pytz.timezone(tz)
    written = 0
    for entry in result.entries:
        try:
            event = _build_event(entry, zone, term_start, term_end)
        except ValueError:
            continue
        if event is None:
            continue
        cal.add_component(event)
        written += 1

    Path(out_path).write_text(cal.to_ical().decode("utf-8"), encoding="utf-8")
    return written


def export_csv(result: ParsedResult, out_path: str | Path) -> None:
    """One CSV row per entry."""
    keys = [f.name for f in fields(TimetableEntry)]
    with open(out_path, "w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=keys, extrasaction="ignore")
        w.writeheader()
        w.writerows(e.to_dict() for e in result.entries)


def export_json(result: ParsedResult, out_path: str | Path) -> None:
    data = {
        "entries": [e.to_dict() for e in result.entries],
        "units": [u.to_dict() for u in result.units.values()],
    }
    Path(out_path).write_text(
        json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8"
    )


def export(
    result: ParsedResult,
    out_path: str | Path,
    fmt: str,
    term_start: str | None = None,
    term_end: str | None = None,
    tz: str = DEFAULT_TIMEZONE,
) -> None:
    """Export to the given format: ics, csv, or json."""
    fmt = fmt.lower()
    if fmt == "ics":
        export_ics(result, out_path, term_start=term_start, term_end=term_end, tz=tz)
    elif fmt == "csv":
        export_csv(result, out_path)
    elif fmt == "json":
        export_json(result, out_path)
    else:
        raise ValueError(f"Unsupported format: {fmt}. Use ics, csv, or json.")
