"""
Records produced by a timetable parse.

Every parse builds fresh objects; nothing here is shared between calls.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Dict, List, Optional


class SessionType(str, Enum):
    LECTURE = "Lecture"
    TUTORIAL = "Tutorial"
    LAB = "Lab"
    EXAM = "Exam"


@dataclass
class TimetableEntry:
    """
    One scheduled session.

    Weekly classes carry day + time_start + time_end; exams carry exam_date.
    Partially extracted entries keep None for whatever could not be read.
    """

    unit_code: str
    unit_name: str
    session_type: SessionType
    day: Optional[str]
    time_start: Optional[str]
    time_end: Optional[str]
    venue: Optional[str]
    lecturer: Optional[str]
    semester: int
    year: int
    institution_id: str
    exam_date: Optional[str] = None

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["session_type"] = self.session_type.value
        return data


@dataclass
class UnitRecord:
    code: str
    name: str
    department: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


@dataclass
class ParsedResult:
    entries: List[TimetableEntry] = field(default_factory=list)
    units: Dict[str, UnitRecord] = field(default_factory=dict)

    def add_unit(self, code: str, name: str, department: Optional[str]) -> None:
        """Register a unit the first time its code is seen; later sightings are ignored."""
        if code not in self.units:
            self.units[code] = UnitRecord(code=code, name=name or code, department=department)


@dataclass
class ParseOutcome:
    """What the parser engine hands back: one parser's result, or a reason for failure."""

    success: bool
    data: Optional[ParsedResult] = None
    error: Optional[str] = None
    parser_used: Optional[str] = None
