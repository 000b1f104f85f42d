"""Tests for spreadsheet.py – file decoding and templates."""
from datetime import datetime, time

import openpyxl
import pytest
import xlrd

from timetable_ingest.engine import parse_file
from timetable_ingest.spreadsheet import (
    TEMPLATES,
    _xls_value,
    read_grid,
    read_html_table,
    template_filename,
    write_template,
)

SPAN_HTML = """
<html><body>
<p>Semester I</p>
<table>
  <tr><th>Time</th><th>MONDAY</th><th>TUESDAY</th></tr>
  <tr><td rowspan="2">07:00 - 10:00</td><td>BCB 105 - LR1<br>BCS 113 - LT2</td><td>BIT 314 - ICT1</td></tr>
  <tr><td>BCB 204 - LAB</td><td>&nbsp;</td></tr>
  <tr><td colspan="3">LUNCH BREAK</td></tr>
</table>
</body></html>
"""

SPAN_GRID = [
    ["Time", "MONDAY", "TUESDAY"],
    ["07:00 - 10:00", "BCB 105 - LR1\nBCS 113 - LT2", "BIT 314 - ICT1"],
    [None, "BCB 204 - LAB", None],
    ["LUNCH BREAK", None, None],
]


class TestReadGrid:
    def test_csv_rows_padded(self, tmp_path):
        path = tmp_path / "t.csv"
        path.write_text("Unit Code,Day\nBCB 105,MONDAY,extra\n\n", encoding="utf-8")
        assert read_grid(path) == [
            ["Unit Code", "Day", None],
            ["BCB 105", "MONDAY", "extra"],
        ]

    def test_xlsx_values(self, tmp_path):
        path = tmp_path / "t.xlsx"
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Code", "Exam Date", "Slot"])
        ws.append(["BCB 105", datetime(2025, 12, 15), "BCB 105 - LR1\nBCS 113 - LT2"])
        ws.append([None, None, None])
        wb.save(path)

        assert read_grid(path) == [
            ["Code", "Exam Date", "Slot"],
            ["BCB 105", "2025-12-15", "BCB 105 - LR1\nBCS 113 - LT2"],
        ]

    def test_xls_time_cells(self, tmp_path):
        xlwt = pytest.importorskip("xlwt")
        path = tmp_path / "t.xls"
        book = xlwt.Workbook()
        sheet = book.add_sheet("Timetable")
        time_style = xlwt.easyxf(num_format_str="HH:MM")
        for col, header in enumerate(["Unit Code", "Day", "Start", "End", "Venue"]):
            sheet.write(0, col, header)
        sheet.write(1, 0, "BCB 105")
        sheet.write(1, 1, "Mon")
        sheet.write(1, 2, time(7, 0), time_style)
        sheet.write(1, 3, time(10, 0), time_style)
        sheet.write(1, 4, "LR1")
        book.save(str(path))

        assert read_grid(path) == [
            ["Unit Code", "Day", "Start", "End", "Venue"],
            ["BCB 105", "Mon", "07:00", "10:00", "LR1"],
        ]
        outcome = parse_file(path, semester=1, year=2025, institution_id="kfu")
        entry = outcome.data.entries[0]
        assert (entry.time_start, entry.time_end) == ("07:00:00", "10:00:00")

    def test_html_spans(self, tmp_path):
        path = tmp_path / "t.html"
        path.write_text(SPAN_HTML, encoding="utf-8")
        assert read_grid(path) == SPAN_GRID

    def test_html_saved_as_xls(self, tmp_path):
        path = tmp_path / "export.xls"
        path.write_text(SPAN_HTML, encoding="utf-8")
        assert read_grid(path) == SPAN_GRID

    def test_corrupt_xlsx(self, tmp_path):
        path = tmp_path / "t.xlsx"
        path.write_bytes(b"not a zip file")
        with pytest.raises(ValueError, match="Could not read Excel file"):
            read_grid(path)

    def test_unsupported_extension(self, tmp_path):
        path = tmp_path / "t.pdf"
        path.write_bytes(b"%PDF")
        with pytest.raises(ValueError, match="Unsupported file type"):
            read_grid(path)


def test_read_html_without_table():
    with pytest.raises(ValueError, match="Could not find a table"):
        read_html_table("<html><body><p>nothing</p></body></html>")


class TestTemplates:
    @pytest.mark.parametrize("name", list(TEMPLATES))
    def test_template_is_claimed_by_its_parser(self, tmp_path, name):
        path = write_template(name, tmp_path / template_filename(name))
        outcome = parse_file(path, semester=1, year=2025, institution_id="kfu")
        assert outcome.success is True
        assert outcome.parser_used == name

    def test_grid_template_entries(self, tmp_path):
        name = next(iter(TEMPLATES))
        path = write_template(name, tmp_path / "grid.xlsx")
        outcome = parse_file(path, semester=1, year=2025, institution_id="kfu")
        assert [(e.unit_code, e.day) for e in outcome.data.entries] == [
            ("BCB 105", "MONDAY"),
            ("BIT 314", "TUESDAY"),
            ("BCS 113", "WEDNESDAY"),
            ("BCB 204", "TUESDAY"),
            ("BIT 210", "THURSDAY"),
        ]

    def test_filename(self):
        assert template_filename("Exam Format") == "timetable_template_exam_format.xlsx"

    def test_unknown_template(self, tmp_path):
        with pytest.raises(ValueError, match="Template not found"):
            write_template("PDF Format", tmp_path / "x.xlsx")


class TestXlsValue:
    def test_time_only(self):
        assert _xls_value(xlrd.sheet.Cell(xlrd.XL_CELL_DATE, 10.5 / 24), 0) == time(10, 30)

    def test_date(self):
        assert _xls_value(xlrd.sheet.Cell(xlrd.XL_CELL_DATE, 46006.0), 0) == datetime(2025, 12, 15)

    def test_blank_and_text(self):
        assert _xls_value(xlrd.sheet.Cell(xlrd.XL_CELL_EMPTY, ""), 0) is None
        assert _xls_value(xlrd.sheet.Cell(xlrd.XL_CELL_TEXT, "BCB 105"), 0) == "BCB 105"
