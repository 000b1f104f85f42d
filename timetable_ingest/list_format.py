"""
List layout: one row per class under a header row.

    | Unit Code | Unit Name | Day    | Time          | Venue | Lecturer  |
    | BCB 105   | Biology   | MONDAY | 07:00 - 10:00 | LR1   | Dr. Smith |
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List

from .cells import (
    cell_at,
    clean_string,
    classify_session_type,
    department_for,
    extract_unit_code,
    normalize_day_name,
    parse_time_of_day,
    parse_time_range,
)
from .model import ParsedResult, TimetableEntry

logger = logging.getLogger(__name__)

NAME = "List Format (Row per Class)"
DESCRIPTION = (
    "Parses timetables where each row represents one class "
    "with columns for different attributes"
)

_DETECT_ROWS = 5
_HEADER_SCAN_ROWS = 10
_MIN_MATCHES = 3

_DETECT_GROUPS = [
    ("unit", "code", "course"),
    ("day", "week"),
    ("time", "start", "end"),
    ("venue", "room", "location"),
    ("lecturer", "instructor", "teacher"),
]

# First matching rule claims a header cell: "Lecturer Name" is a lecturer,
# "Course Title" a name, "Course Code" a code. A "Week" column is the day
# column only when no "Day" header exists.
_COLUMN_RULES = [
    ("lecturer", ("lecturer", "instructor", "teacher")),
    ("venue", ("venue", "room", "location")),
    ("unit_code", ("code",)),
    ("unit_name", ("name", "title")),
    ("type", ("type", "class")),
    ("day", ("day",)),
    ("time_start", ("start",)),
    ("time_end", ("end",)),
    ("time", ("time",)),
    ("unit_code", ("unit", "course")),
    ("week", ("week",)),
]


def detect(grid: List[List[Any]]) -> bool:
    for row in grid[:_DETECT_ROWS]:
        cells = [clean_string(c).lower() for c in row or []]
        matched = sum(
            1 for keywords in _DETECT_GROUPS
            if any(k in cell for cell in cells for k in keywords)
        )
        if matched >= _MIN_MATCHES:
            return True
    return False


def map_columns(row: List[Any]) -> Dict[str, int]:
    """Header row -> {field: column index}."""
    columns: Dict[str, int] = {}
    for index, cell in enumerate(row or []):
        text = clean_string(cell).lower()
        if not text:
            continue
        for key, keywords in _COLUMN_RULES:
            if any(k in text for k in keywords):
                columns.setdefault(key, index)
                break
    week = columns.pop("week", None)
    if week is not None:
        columns.setdefault("day", week)
    return columns


def _find_header(grid: List[List[Any]]) -> tuple[int, Dict[str, int]]:
    for i, row in enumerate(grid[:_HEADER_SCAN_ROWS]):
        columns = map_columns(row)
        if len(columns) >= _MIN_MATCHES:
            return i, columns
    raise ValueError("Could not identify column structure in the timetable")


def _row_times(row: List[Any], columns: Dict[str, int]) -> tuple[str, str] | None:
    start_raw = cell_at(row, columns.get("time_start"))
    if "time" in columns:
        time_raw = cell_at(row, columns["time"])
        times = parse_time_range(time_raw)
        if times:
            return times
        # A plain "Time" beside "End Time" holds the start.
        if "time_start" not in columns:
            start_raw = time_raw

    end_raw = cell_at(row, columns.get("time_end"))
    # Some sheets put '07:00-10:00' in the start column and leave end blank.
    if start_raw and not end_raw:
        return parse_time_range(start_raw)

    start = parse_time_of_day(start_raw)
    end = parse_time_of_day(end_raw)
    if start and end:
        return start, end
    return None


def parse(
    grid: List[List[Any]],
    semester: int,
    year: int,
    institution_id: str,
) -> ParsedResult:
    header_index, columns = _find_header(grid)
    result = ParsedResult()

    for row in grid[header_index + 1:]:
        if not row:
            continue

        code_cell = cell_at(row, columns.get("unit_code"))
        unit_code = extract_unit_code(code_cell) or code_cell
        if len(unit_code) < 2:
            continue

        unit_name = cell_at(row, columns.get("unit_name")) or unit_code
        day = normalize_day_name(cell_at(row, columns.get("day")))
        times = _row_times(row, columns)

        type_cell = cell_at(row, columns.get("type"))
        session_type = classify_session_type(type_cell or f"{unit_code} {unit_name}")

        result.add_unit(unit_code, unit_name, department_for(unit_code))
        result.entries.append(TimetableEntry(
            unit_code=unit_code,
            unit_name=unit_name,
            session_type=session_type,
            day=day,
            time_start=times[0] if times else None,
            time_end=times[1] if times else None,
            venue=cell_at(row, columns.get("venue")) or None,
            lecturer=cell_at(row, columns.get("lecturer")) or None,
            semester=semester,
            year=year,
            institution_id=institution_id,
        ))

    logger.debug("List parser read %d entries below header row %d", len(result.entries), header_index)
    return result
