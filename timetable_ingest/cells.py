"""
Cell and token helpers shared by every timetable format parser.

Registrar spreadsheets put everything into free-text cells:
    "BCB 105 - 24F8 / OBED"
    "07:00 - 10:00"
    "15/12/2025"
These helpers turn such cells into normalized values. They never raise on
bad input; "no match" is reported as None so callers can skip the cell.
"""
from __future__ import annotations

import re
from datetime import date
from typing import Any, List

from .model import SessionType


# ──────────────────────────────────────────────────────────────────
#  Text
# ──────────────────────────────────────────────────────────────────

def cell_text(value: Any) -> str:
    """Raw text of a cell value, line breaks kept; whole floats lose their '.0'."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def clean_string(value: Any) -> str:
    """Any cell value -> trimmed text with whitespace runs collapsed."""
    return re.sub(r"\s+", " ", cell_text(value)).strip()


# ──────────────────────────────────────────────────────────────────
#  Time helpers
# ──────────────────────────────────────────────────────────────────

_TIME_RANGE_RE = re.compile(
    r"(\d{1,2}):(\d{2})\s*(AM|PM|am|pm)?\s*[-–]\s*"
    r"(\d{1,2}):(\d{2})\s*(AM|PM|am|pm)?"
)

_TIME_OF_DAY_RE = re.compile(
    r"^(\d{1,2})[:.](\d{2})(?::(\d{2}))?\s*(AM|PM|am|pm)?$"
)


def _to_24(h: str, mm: str, ap: str | None) -> str:
    hour = int(h)
    if ap:
        ap_u = ap.upper()
        if ap_u == "AM" and hour == 12:
            hour = 0
        elif ap_u == "PM" and hour != 12:
            hour += 12
    return f"{hour:02d}:{int(mm):02d}:00"


def parse_time_range(text: str) -> tuple[str, str] | None:
    """
    Parse '07:00 - 10:00', '7:00-10:00' or '06:30PM - 09:15PM'
    into 24-hour ('HH:MM:SS', 'HH:MM:SS').
    """
    if not text:
        return None
    m = _TIME_RANGE_RE.search(text)
    if not m:
        return None
    h1, m1, ap1, h2, m2, ap2 = m.groups()
    return _to_24(h1, m1, ap1), _to_24(h2, m2, ap2)


def parse_time_of_day(text: str) -> str | None:
    """Parse a single clock time like '7:00', '07:00:00' or '2:30 PM'."""
    if not text:
        return None
    m = _TIME_OF_DAY_RE.match(text.strip())
    if not m:
        return None
    h, mm, _, ap = m.groups()
    return _to_24(h, mm, ap)


# ──────────────────────────────────────────────────────────────────
#  Dates
# ──────────────────────────────────────────────────────────────────

# Slash dates are always day-first (DD/MM/YYYY).
_DATE_FORMATS = [
    (re.compile(r"(\d{1,2})/(\d{1,2})/(\d{4})"), ("d", "m", "y")),
    (re.compile(r"(\d{4})-(\d{1,2})-(\d{1,2})"), ("y", "m", "d")),
    (re.compile(r"(\d{1,2})-(\d{1,2})-(\d{4})"), ("d", "m", "y")),
]


def parse_date(text: str) -> str | None:
    """
    Parse a date cell into ISO 'YYYY-MM-DD'.
    Tries DD/MM/YYYY, YYYY-MM-DD, DD-MM-YYYY; the first matching pattern wins.
    """
    if not text:
        return None
    for pattern, order in _DATE_FORMATS:
        m = pattern.search(text)
        if not m:
            continue
        parts = dict(zip(order, (int(g) for g in m.groups())))
        try:
            return date(parts["y"], parts["m"], parts["d"]).isoformat()
        except ValueError:
            return None
    return None


# ──────────────────────────────────────────────────────────────────
#  Unit codes
# ──────────────────────────────────────────────────────────────────

# BCB105, BCB 105, BCB-105, SPH 201A
UNIT_CODE_RE = re.compile(r"\b([A-Z]{2,4})[\s-]?(\d{3})([A-Z]?)\b", re.IGNORECASE)


def _canonical_code(m: re.Match) -> str:
    letters, digits, suffix = m.groups()
    return f"{letters.upper()} {digits}{suffix.upper()}"


def extract_unit_code(text: str) -> str | None:
    """First unit code in text, normalized to 'BCB 105'."""
    if not text:
        return None
    m = UNIT_CODE_RE.search(text)
    return _canonical_code(m) if m else None


def find_unit_codes(text: str) -> List[str]:
    """All distinct unit codes in text, e.g. cross-listed 'BIT 113/BCS 110'."""
    codes: List[str] = []
    if not text:
        return codes
    for m in UNIT_CODE_RE.finditer(text):
        code = _canonical_code(m)
        if code not in codes:
            codes.append(code)
    return codes


def department_for(code: str) -> str | None:
    """Department is the letter prefix of a unit code ('BCB 105' -> 'BCB')."""
    m = re.match(r"[A-Z]+", code or "")
    return m.group(0) if m else None


# ──────────────────────────────────────────────────────────────────
#  Session type / day names
# ──────────────────────────────────────────────────────────────────

_SESSION_KEYWORDS = [
    (SessionType.LAB, ("lab", "practical", "prac")),
    (SessionType.TUTORIAL, ("tutorial", "tut")),
    (SessionType.EXAM, ("exam",)),
    (SessionType.LECTURE, ("lecture", "lec")),
]


def classify_session_type(text: str) -> SessionType:
    """Keyword match on the text; Lecture when nothing matches."""
    lower = (text or "").lower()
    for session_type, keywords in _SESSION_KEYWORDS:
        if any(k in lower for k in keywords):
            return session_type
    return SessionType.LECTURE


DAY_NAMES = [
    "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY", "SATURDAY", "SUNDAY",
]

_DAY_MAP = {
    "mo": "MONDAY", "mon": "MONDAY", "monday": "MONDAY",
    "tu": "TUESDAY", "tue": "TUESDAY", "tues": "TUESDAY", "tuesday": "TUESDAY",
    "we": "WEDNESDAY", "wed": "WEDNESDAY", "weds": "WEDNESDAY", "wednesday": "WEDNESDAY",
    "th": "THURSDAY", "thu": "THURSDAY", "thur": "THURSDAY", "thurs": "THURSDAY",
    "thursday": "THURSDAY",
    "fr": "FRIDAY", "fri": "FRIDAY", "friday": "FRIDAY",
    "sa": "SATURDAY", "sat": "SATURDAY", "saturday": "SATURDAY",
    "su": "SUNDAY", "sun": "SUNDAY", "sunday": "SUNDAY",
}

_DAY_ABBREV_RE = re.compile(r"\b(MON|TUES?|WED|THU(?:RS?)?|FRI|SAT|SUN)\b")


def normalize_day_name(text: str) -> str | None:
    """
    Normalize 'Mon', 'tues', 'Thursday' to 'MONDAY', 'TUESDAY', 'THURSDAY'.
    Unknown text is returned upper-cased as-is.
    """
    t = clean_string(text)
    if not t:
        return None
    return _DAY_MAP.get(t.lower().rstrip("."), t.upper())


def find_day_name(text: str) -> str | None:
    """Canonical day named in a header cell ('MONDAY', 'Mon 3rd'), else None."""
    upper = clean_string(text).upper()
    for day in DAY_NAMES:
        if day in upper:
            return day
    m = _DAY_ABBREV_RE.search(upper)
    if m:
        return _DAY_MAP[m.group(1).lower()]
    return None


# ──────────────────────────────────────────────────────────────────
#  Row access
# ──────────────────────────────────────────────────────────────────

def cell_at(row: List[Any] | None, index: int | None) -> str:
    """Cleaned text of row[index]; '' for a missing row, column or index."""
    if not row or index is None or index >= len(row):
        return ""
    return clean_string(row[index])
