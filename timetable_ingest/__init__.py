"""Detect and parse university timetable spreadsheets."""
from __future__ import annotations

__version__ = "0.1.0"

from .engine import available_parsers, parse_file, parse_grid  # noqa: E402
from .model import ParsedResult, ParseOutcome, SessionType, TimetableEntry, UnitRecord  # noqa: E402

__all__ = [
    "__version__",
    "available_parsers",
    "parse_file",
    "parse_grid",
    "ParsedResult",
    "ParseOutcome",
    "SessionType",
    "TimetableEntry",
    "UnitRecord",
]
