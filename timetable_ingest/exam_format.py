"""
Exam layout: one row per paper, keyed by date instead of weekday.

    | Unit Code | Unit Name | Exam Date  | Time          | Hall      | Invigilator |
    | BCB 105   | Biology   | 15/12/2025 | 09:00 - 12:00 | Main Hall | Dr. Smith   |
"""
from __future__ import annotations

import re
from typing import Any, Dict, List

from .cells import cell_at, clean_string, department_for, extract_unit_code, parse_date
from .model import ParsedResult, SessionType, TimetableEntry

NAME = "Exam Format"
DESCRIPTION = "Parses exam timetables with dates, times, and venues"

_SCAN_ROWS = 10
_DATE_LIKE_RE = re.compile(r"\d{1,2}[/-]\d{1,2}[/-]\d{2,4}")

_COLUMN_RULES = [
    ("lecturer", ("invigilator", "supervisor")),
    ("venue", ("venue", "room", "hall")),
    ("unit_code", ("code",)),
    ("unit_name", ("name", "title")),
    ("date", ("date",)),
    ("time", ("time", "start")),
    ("unit_code", ("unit", "course")),
]


def detect(grid: List[List[Any]]) -> bool:
    has_exam = False
    has_date = False
    for row in grid[:_SCAN_ROWS]:
        cells = [clean_string(c).lower() for c in row or []]
        if any("exam" in c for c in cells):
            has_exam = True
        if any("date" in c or _DATE_LIKE_RE.search(c) for c in cells):
            has_date = True
    return has_exam and has_date


def map_columns(row: List[Any]) -> Dict[str, int]:
    columns: Dict[str, int] = {}
    for index, cell in enumerate(row or []):
        text = clean_string(cell).lower()
        if not text:
            continue
        for key, keywords in _COLUMN_RULES:
            if any(k in text for k in keywords):
                columns.setdefault(key, index)
                break
    return columns


def _find_header(grid: List[List[Any]]) -> tuple[int, Dict[str, int]]:
    for i, row in enumerate(grid[:_SCAN_ROWS]):
        columns = map_columns(row)
        if "unit_code" in columns and "date" in columns:
            return i, columns
    raise ValueError("Could not identify exam timetable structure")


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

        code_cell = cell_at(row, columns["unit_code"])
        unit_code = extract_unit_code(code_cell) or code_cell
        if len(unit_code) < 2:
            continue

        unit_name = cell_at(row, columns.get("unit_name")) or unit_code

        result.add_unit(unit_code, unit_name, department_for(unit_code))
        result.entries.append(TimetableEntry(
            unit_code=unit_code,
            unit_name=unit_name,
            session_type=SessionType.EXAM,
            day=None,
            time_start=None,
            time_end=None,
            venue=cell_at(row, columns.get("venue")) or None,
            lecturer=cell_at(row, columns.get("lecturer")) or None,
            semester=semester,
            year=year,
            institution_id=institution_id,
            exam_date=parse_date(cell_at(row, columns["date"])),
        ))

    return result
