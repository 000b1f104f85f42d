"""
Read the first sheet of a timetable file into a raw grid, and write the
sample templates users fill in.

Supported inputs:
- .xlsx / .xlsm (openpyxl)
- .xls (xlrd); registrar systems often save HTML tables with an .xls name,
  those are read as HTML
- .csv
- .html / .htm: the first <table>, rowspan/colspan expanded

The grid is a list of equal-length rows. Cells are str, int, float or None;
dates become 'YYYY-MM-DD' and times 'HH:MM'. Cells covered by a merge or a
span are None, only the top-left cell holds the value.
"""
from __future__ import annotations

import csv
import zipfile
from datetime import date, datetime, time
from pathlib import Path
from typing import Any, Dict, List

import openpyxl
import xlrd
from bs4 import BeautifulSoup  # type: ignore[import]
from openpyxl.utils.exceptions import InvalidFileException

from . import exam_format, grid_format, list_format


# ──────────────────────────────────────────────────────────────────
#  Cell normalization
# ──────────────────────────────────────────────────────────────────

def _normalize_cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        if value.time() == time(0, 0):
            return value.date().isoformat()
        return value.strftime("%Y-%m-%d %H:%M")
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, time):
        return value.strftime("%H:%M")
    if isinstance(value, str):
        return value if value.strip() else None
    return value


def _to_grid(rows: List[List[Any]]) -> List[List[Any]]:
    """Normalize cells, drop trailing blank rows, pad rows to one width."""
    grid = [[_normalize_cell(v) for v in row] for row in rows]
    while grid and all(v is None for v in grid[-1]):
        grid.pop()
    width = max((len(row) for row in grid), default=0)
    return [row + [None] * (width - len(row)) for row in grid]


# ──────────────────────────────────────────────────────────────────
#  Readers
# ──────────────────────────────────────────────────────────────────

def _read_xlsx(path: Path) -> List[List[Any]]:
    try:
        wb = openpyxl.load_workbook(path, read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, KeyError) as e:
        raise ValueError(f"Could not read Excel file {path.name}: {e}") from e
    try:
        ws = wb.worksheets[0]
        return [list(row) for row in ws.iter_rows(values_only=True)]
    finally:
        wb.close()


def _xls_value(cell: xlrd.sheet.Cell, datemode: int) -> Any:
    if cell.ctype in (xlrd.XL_CELL_EMPTY, xlrd.XL_CELL_BLANK):
        return None
    if cell.ctype == xlrd.XL_CELL_DATE:
        # Time-only cells have no day part
        if cell.value < 1:
            return time(*xlrd.xldate_as_tuple(cell.value, datemode)[3:])
        return xlrd.xldate_as_datetime(cell.value, datemode)
    return cell.value


def _read_xls(path: Path) -> List[List[Any]]:
    try:
        book = xlrd.open_workbook(str(path))
    except xlrd.XLRDError as e:
        raise ValueError(f"Could not read Excel file {path.name}: {e}") from e
    sheet = book.sheet_by_index(0)
    return [[_xls_value(cell, book.datemode) for cell in sheet.row(r)] for r in range(sheet.nrows)]


def _read_csv(path: Path) -> List[List[Any]]:
    with open(path, newline="", encoding="utf-8-sig") as f:
        return [list(row) for row in csv.reader(f)]


def _span(cell, attr: str) -> int:
    try:
        return max(1, int(cell.get(attr, 1)))
    except (TypeError, ValueError):
        return 1


def read_html_table(html: str) -> List[List[Any]]:
    """
    First <table> of an HTML document as rows of cell text.

    A cell with rowspan/colspan occupies every position it covers, so later
    cells in the covered rows shift right, the way a browser lays them out.
    """
    soup = BeautifulSoup(html, "html.parser")
    table = soup.find("table")
    if table is None:
        raise ValueError("Could not find a table in the HTML file.")

    cells: Dict[tuple[int, int], Any] = {}
    n_rows = 0
    for r, tr in enumerate(table.find_all("tr")):
        n_rows = r + 1
        col = 0
        for td in tr.find_all(["td", "th"]):
            while (r, col) in cells:
                col += 1
            rowspan, colspan = _span(td, "rowspan"), _span(td, "colspan")
            text = td.get_text(separator="\n", strip=True) or None
            for dr in range(rowspan):
                for dc in range(colspan):
                    cells[(r + dr, col + dc)] = text if (dr, dc) == (0, 0) else None
            col += colspan

    n_cols = max((c for _, c in cells), default=-1) + 1
    return [[cells.get((r, c)) for c in range(n_cols)] for r in range(n_rows)]


def _looks_like_html(path: Path) -> bool:
    with open(path, "rb") as f:
        head = f.read(512).lstrip().lower()
    return head.startswith(b"<")


def read_grid(path: str | Path) -> List[List[Any]]:
    """Decode the first sheet of a timetable file. Raises ValueError for unsupported files."""
    p = Path(path)
    ext = p.suffix.lower()
    if ext in (".xlsx", ".xlsm"):
        rows = _read_xlsx(p)
    elif ext == ".xls":
        if _looks_like_html(p):
            rows = read_html_table(p.read_text(encoding="utf-8", errors="ignore"))
        else:
            rows = _read_xls(p)
    elif ext == ".csv":
        rows = _read_csv(p)
    elif ext in (".html", ".htm"):
        rows = read_html_table(p.read_text(encoding="utf-8", errors="ignore"))
    else:
        raise ValueError(
            f"Unsupported file type: {ext or p.name}. Use .xlsx, .xls, .csv or .html."
        )
    return _to_grid(rows)


# ──────────────────────────────────────────────────────────────────
#  Templates
# ──────────────────────────────────────────────────────────────────

TEMPLATES: Dict[str, List[List[Any]]] = {
    grid_format.NAME: [
        ["TIMETABLE - SEMESTER I (2025/2026)"],
        [],
        ["", "MONDAY", "TUESDAY", "WEDNESDAY", "THURSDAY", "FRIDAY"],
        ["07:00 - 10:00", "BCB 105 - LR1 / Dr. Smith", "BIT 314 - ICT1 / Prof. Jones",
         "BCS 113 - LT2 / Mr. Brown", "", ""],
        ["10:00 - 13:00", "", "BCB 204 - LAB / Dr. Smith", "", "BIT 210 - ICT2 / Ms. Davis", ""],
    ],
    list_format.NAME: [
        ["Unit Code", "Unit Name", "Day", "Time", "Venue", "Lecturer"],
        ["BCB 105", "Biology", "MONDAY", "07:00 - 10:00", "LR1", "Dr. Smith"],
        ["BIT 314", "Programming", "TUESDAY", "07:00 - 10:00", "ICT1", "Prof. Jones"],
        ["BCS 113", "Data Structures", "WEDNESDAY", "07:00 - 10:00", "LT2", "Mr. Brown"],
    ],
    exam_format.NAME: [
        ["Unit Code", "Unit Name", "Exam Date", "Time", "Hall", "Invigilator"],
        ["BCB 105", "Biology", "15/12/2025", "09:00 - 12:00", "Main Hall", "Dr. Smith"],
        ["BIT 314", "Programming", "16/12/2025", "09:00 - 12:00", "LT1", "Prof. Jones"],
    ],
}


def template_filename(name: str) -> str:
    """'List Format (Row per Class)' -> 'timetable_template_list_format_(row_per_class).xlsx'."""
    return f"timetable_template_{'_'.join(name.lower().split())}.xlsx"


def write_template(name: str, out_path: str | Path) -> Path:
    """Write the sample sheet for one parser as .xlsx."""
    rows = TEMPLATES.get(name)
    if rows is None:
        raise ValueError(f"Template not found for format: {name}")
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Timetable"
    for row in rows:
        ws.append([v if v != "" else None for v in row])
    out = Path(out_path)
    wb.save(out)
    return out
