"""
Grid layout: time slots down column 0, one column per weekday.

Typical sheet (KFU style):

    |               | MONDAY                   | TUESDAY                  | ...
    | 07:00 - 10:00 | BCB 105 - 24F8 / OBED    | BIT 314- 24F1/ OSCAR     |
    |               | BCS 113- 24S2 /OCHOLI    |                          |   <- same slot
    | 10:00 - 13:00 | BIT 113/BCS 110 - ICT1 / KAMAU                      |

- A cell may list several concurrent classes, one per line.
- A line may cross-list several unit codes that share venue and lecturer.
- A row without a time in column 0 continues the slot of the row above.
"""
from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, NamedTuple

from .cells import (
    UNIT_CODE_RE,
    cell_text,
    clean_string,
    classify_session_type,
    department_for,
    find_day_name,
    find_unit_codes,
    parse_time_range,
)
from .model import ParsedResult, TimetableEntry

logger = logging.getLogger(__name__)

NAME = "Grid Format (Days as Columns)"
DESCRIPTION = "Parses timetables with time slots in rows and days (Mon-Fri) in columns"

_DETECT_ROWS = 5
_HEADER_SCAN_ROWS = 10
_MIN_DAY_COLUMNS = 3
_MIN_FRAGMENT_LEN = 4

_DAY_KEYWORDS = [
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY",
    "MON", "TUE", "WED", "THU", "FRI",
]

_LOOSE_CODE_RE = re.compile(r"([A-Z]{1,6})\s?\d{1,4}[A-Z]?")

# Leading words of grid notes such as 'ROOM 12 CLOSED' or 'WEEK 5 - HOLIDAY'
_NOTICE_WORDS = {"BREAK", "CLOSED", "FREE", "HOLIDAY", "LUNCH", "NOTICE", "ROOM", "WEEK"}


class CellEntry(NamedTuple):
    code: str | None
    venue: str | None
    lecturer: str | None


# ──────────────────────────────────────────────────────────────────
#  Detection
# ──────────────────────────────────────────────────────────────────

def detect(grid: List[List[Any]]) -> bool:
    """True when one of the first rows names at least three weekdays."""
    for row in grid[:_DETECT_ROWS]:
        cells = [clean_string(c).upper() for c in row or []]
        matched = [c for c in cells if any(day in c for day in _DAY_KEYWORDS)]
        if len(matched) >= _MIN_DAY_COLUMNS:
            return True
    return False


def _find_day_columns(grid: List[List[Any]]) -> tuple[int, Dict[str, int]]:
    """Locate the header row and map each day name to its column index."""
    for i, row in enumerate(grid[:_HEADER_SCAN_ROWS]):
        columns: Dict[str, int] = {}
        for col, cell in enumerate(row or []):
            day = find_day_name(cell)
            if day and day not in columns:
                columns[day] = col
        if len(columns) >= _MIN_DAY_COLUMNS:
            return i, columns
    raise ValueError("Could not find day columns in the timetable")


# ──────────────────────────────────────────────────────────────────
#  Cell text
# ──────────────────────────────────────────────────────────────────

def _split_fragments(text: str) -> List[str]:
    """One cleaned fragment per line; short noise like '-' or 'NIL' is dropped."""
    fragments = [clean_string(line) for line in re.split(r"[\r\n]+", text)]
    return [f for f in fragments if len(f) >= _MIN_FRAGMENT_LEN]


def _loose_code(text: str) -> str | None:
    """Accept a non-standard code shaped like 'MATH10' or 'CS 10A'; notices are not codes."""
    t = clean_string(text).upper()
    m = _LOOSE_CODE_RE.fullmatch(t)
    if m and m.group(1) not in _NOTICE_WORDS:
        return t
    return None


def _split_code_and_venue(text: str) -> tuple[str | None, str | None]:
    matches = list(UNIT_CODE_RE.finditer(text))
    if matches:
        code = find_unit_codes(text)[0]
        venue = clean_string(text[matches[-1].end():].lstrip(" -–"))
        return code, venue or None
    code_part, _, venue_part = text.partition("-")
    return _loose_code(code_part), clean_string(venue_part) or None


def _positional_entry(text: str) -> CellEntry:
    """
    Space separated fallback: 'CS10 LT 3 JOHN DOE'.
    First 1-2 words are the code, next 1-2 the venue, the rest the lecturer.
    """
    words = text.split()
    if not words:
        return CellEntry(None, None, None)
    if re.search(r"\d", words[0]):
        n = 1
    elif len(words) > 1 and re.search(r"\d", words[1]):
        n = 2
    else:
        return CellEntry(None, None, None)
    code = _loose_code(" ".join(words[:n]))
    rest = words[n:]
    venue_words = 2 if len(rest) > 1 and re.search(r"\d", rest[1]) else 1
    venue = " ".join(rest[:venue_words]) or None
    lecturer = " ".join(rest[venue_words:]) or None
    return CellEntry(code, venue, lecturer)


def parse_cell_entry(fragment: str) -> CellEntry:
    """
    Best-effort split of one class line into (code, venue, lecturer).

    Formats seen in the wild:
        "BCB 105 - 24F8/"
        "BIT 314- 24F1/ OSCAR KUNOTHO"
        "BCB 408 - 24F6 / OBED"
        "BCS 113 - LT2"
    """
    text = clean_string(fragment)
    if not text:
        return CellEntry(None, None, None)

    if "/" in text:
        head, _, tail = text.rpartition("/")
        # A trailing segment holding a unit code is a cross-listing, not a name.
        if find_unit_codes(tail):
            head, lecturer = text, None
        else:
            lecturer = clean_string(tail) or None
        code, venue = _split_code_and_venue(head)
        return CellEntry(code, venue, lecturer)

    if "-" in text:
        code, venue = _split_code_and_venue(text)
        return CellEntry(code, venue, None)

    return _positional_entry(text)


# ──────────────────────────────────────────────────────────────────
#  Parsing
# ──────────────────────────────────────────────────────────────────

def _add_fragment(
    result: ParsedResult,
    fragment: str,
    day: str,
    slot: tuple[str, str],
    semester: int,
    year: int,
    institution_id: str,
) -> None:
    cell = parse_cell_entry(fragment)
    codes = find_unit_codes(fragment)
    if not codes:
        if not cell.code:
            logger.debug("No unit code in fragment %r", fragment)
            return
        codes = [cell.code]

    session_type = classify_session_type(fragment)
    for code in codes:
        result.add_unit(code, code, department_for(code))
        result.entries.append(TimetableEntry(
            unit_code=code,
            unit_name=code,
            session_type=session_type,
            day=day,
            time_start=slot[0],
            time_end=slot[1],
            venue=cell.venue,
            lecturer=cell.lecturer,
            semester=semester,
            year=year,
            institution_id=institution_id,
        ))


def parse(
    grid: List[List[Any]],
    semester: int,
    year: int,
    institution_id: str,
) -> ParsedResult:
    header_index, day_columns = _find_day_columns(grid)
    result = ParsedResult()
    slot: tuple[str, str] | None = None

    for row in grid[header_index + 1:]:
        if not row:
            continue

        times = parse_time_range(clean_string(row[0]))
        if times:
            slot = times

        cells = {day: cell_text(row[col]) for day, col in day_columns.items() if col < len(row)}
        cells = {day: text for day, text in cells.items() if text.strip()}
        if not cells:
            continue
        if slot is None:
            logger.debug("Skipping row before the first time slot: %r", row)
            continue

        for day, text in cells.items():
            for fragment in _split_fragments(text):
                _add_fragment(result, fragment, day, slot, semester, year, institution_id)

    return result
