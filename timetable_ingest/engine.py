"""
Parser engine: pick the timetable layout of a grid and run its parser.

Detectors are heuristics and several may claim the same grid, so the
registry order decides: Grid, then List, then Exam. A parser that raises or
returns no entries hands the grid on to the next candidate.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Sequence

from . import exam_format, grid_format, list_format
from .model import ParsedResult, ParseOutcome
from .spreadsheet import read_grid

logger = logging.getLogger(__name__)

Grid = List[List[Any]]

EMPTY_FILE_ERROR = "The file appears to be empty"
UNKNOWN_FORMAT_ERROR = (
    "Could not detect timetable format. "
    "Please ensure the file follows a supported format."
)


@dataclass(frozen=True)
class FormatParser:
    key: str
    name: str
    description: str
    detect: Callable[[Grid], bool]
    parse: Callable[[Grid, int, int, str], ParsedResult]


PARSERS: List[FormatParser] = [
    FormatParser("grid", grid_format.NAME, grid_format.DESCRIPTION, grid_format.detect, grid_format.parse),
    FormatParser("list", list_format.NAME, list_format.DESCRIPTION, list_format.detect, list_format.parse),
    FormatParser("exam", exam_format.NAME, exam_format.DESCRIPTION, exam_format.detect, exam_format.parse),
]


def available_parsers() -> List[tuple[str, str]]:
    """(name, description) of every registered parser, in dispatch order."""
    return [(p.name, p.description) for p in PARSERS]


def resolve_parser_name(value: str) -> str:
    """Map a short key ('grid') or a case-insensitive full name to the parser name."""
    wanted = value.strip().lower()
    for p in PARSERS:
        if wanted in (p.key, p.name.lower()):
            return p.name
    choices = ", ".join(p.key for p in PARSERS)
    raise ValueError(f"Unknown timetable format: {value!r}. Choose from: {choices}.")


def parse_grid(
    grid: Grid,
    semester: int,
    year: int,
    institution_id: str,
    parsers_to_use: Sequence[str] | None = None,
    registry: Sequence[FormatParser] | None = None,
) -> ParseOutcome:
    """
    Run the first parser whose detector claims the grid and that yields entries.

    :param parsers_to_use: Optional parser names; others are not tried.
    :param registry: Parser list to dispatch over. Defaults to PARSERS.
    """
    if not grid:
        return ParseOutcome(success=False, error=EMPTY_FILE_ERROR)

    candidates = list(registry if registry is not None else PARSERS)
    if parsers_to_use is not None:
        candidates = [p for p in candidates if p.name in parsers_to_use]

    for parser in candidates:
        try:
            if not parser.detect(grid):
                continue
            logger.info("Detected format: %s", parser.name)
            data = parser.parse(grid, semester, year, institution_id)
        except Exception:
            logger.warning("Parser %s failed", parser.name, exc_info=True)
            continue

        if not data.entries:
            logger.info("Parser %s detected but found no entries, trying next parser", parser.name)
            continue

        return ParseOutcome(success=True, data=data, parser_used=parser.name)

    return ParseOutcome(success=False, error=UNKNOWN_FORMAT_ERROR)


def parse_file(
    path: str | Path,
    semester: int,
    year: int,
    institution_id: str,
    parsers_to_use: Sequence[str] | None = None,
) -> ParseOutcome:
    """Decode the first sheet of a timetable file and dispatch it."""
    try:
        grid = read_grid(path)
    except (OSError, ValueError) as e:
        logger.error("Error reading %s: %s", path, e)
        return ParseOutcome(success=False, error=str(e))
    return parse_grid(grid, semester, year, institution_id, parsers_to_use=parsers_to_use)
