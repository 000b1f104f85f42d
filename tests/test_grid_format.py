"""Tests for grid_format.py – days-as-columns timetables."""
import pytest

from timetable_ingest.grid_format import CellEntry, detect, parse, parse_cell_entry
from timetable_ingest.model import SessionType

HEADER = ["TIME", "MONDAY", "TUESDAY", "WEDNESDAY"]


def _parse(rows):
    return parse([HEADER] + rows, 1, 2025, "kfu")


class TestDetect:
    def test_full_day_names(self):
        assert detect([["TIMETABLE"], [], HEADER]) is True

    def test_abbreviations(self):
        assert detect([["", "Mon", "Tue", "Wed"]]) is True

    def test_list_layout_is_not_a_grid(self):
        grid = [
            ["Unit Code", "Day", "Time"],
            ["BCB 105", "MONDAY", "07:00 - 10:00"],
            ["BIT 314", "TUESDAY", "07:00 - 10:00"],
        ]
        assert detect(grid) is False

    def test_days_below_row_five_are_ignored(self):
        grid = [["x"]] * 5 + [HEADER]
        assert detect(grid) is False


class TestParseCellEntry:
    def test_code_venue_lecturer(self):
        assert parse_cell_entry("BCB 408 - 24F6 / OBED") == CellEntry("BCB 408", "24F6", "OBED")

    def test_tight_separators(self):
        assert parse_cell_entry("BIT 314- 24F1/ OSCAR KUNOTHO") == CellEntry("BIT 314", "24F1", "OSCAR KUNOTHO")

    def test_trailing_slash_without_lecturer(self):
        assert parse_cell_entry("BCB 105 - 24F8/") == CellEntry("BCB 105", "24F8", None)

    def test_hyphen_only(self):
        assert parse_cell_entry("BCS 113 - LT2") == CellEntry("BCS 113", "LT2", None)

    def test_hyphenated_code(self):
        assert parse_cell_entry("BCB-105-LR1") == CellEntry("BCB 105", "LR1", None)

    def test_cross_listing_is_not_a_lecturer(self):
        assert parse_cell_entry("BIT 113/BCS 110 - ICT1") == CellEntry("BIT 113", "ICT1", None)

    def test_non_standard_code(self):
        assert parse_cell_entry("MATH10 - LT1 / Dr. X") == CellEntry("MATH10", "LT1", "Dr. X")

    def test_positional_fallback(self):
        assert parse_cell_entry("CS10 LT 3 JOHN DOE") == CellEntry("CS10", "LT 3", "JOHN DOE")

    def test_no_code(self):
        assert parse_cell_entry("LUNCH BREAK") == CellEntry(None, None, None)


class TestParse:
    def test_basic_grid(self):
        result = parse(
            [
                ["TIMETABLE - SEMESTER I"],
                [],
                ["", "MONDAY", "TUESDAY", "WEDNESDAY"],
                ["07:00 - 10:00", "BCB 105 - 24F8 / OBED", "BIT 314- 24F1/ OSCAR KUNOTHO", None],
                ["10:00 - 13:00", None, None, "BCS 113- 24S2 /OCHOLI"],
            ],
            1,
            2025,
            "kfu",
        )
        assert [e.unit_code for e in result.entries] == ["BCB 105", "BIT 314", "BCS 113"]

        first = result.entries[0]
        assert first.day == "MONDAY"
        assert (first.time_start, first.time_end) == ("07:00:00", "10:00:00")
        assert first.venue == "24F8"
        assert first.lecturer == "OBED"
        assert first.unit_name == "BCB 105"
        assert first.session_type == SessionType.LECTURE
        assert (first.semester, first.year, first.institution_id) == (1, 2025, "kfu")
        assert first.exam_date is None

        last = result.entries[2]
        assert last.day == "WEDNESDAY"
        assert (last.time_start, last.time_end) == ("10:00:00", "13:00:00")
        assert last.venue == "24S2"
        assert last.lecturer == "OCHOLI"

        assert list(result.units) == ["BCB 105", "BIT 314", "BCS 113"]
        assert result.units["BCB 105"].department == "BCB"
        assert result.units["BCB 105"].name == "BCB 105"

    def test_unpadded_time_slot(self):
        result = _parse([["7:00-10:00", "BCB 105 - LR1 / A", None, None]])
        assert result.entries[0].time_start == "07:00:00"

    def test_continuation_row_keeps_time_slot(self):
        result = _parse([
            ["07:00 - 10:00", "BCB 105 - LR1 / A", None, None],
            [None, "BCS 113 - LT2 / B", None, None],
            ["10:00 - 13:00", None, "BIT 210 - ICT2 / C", None],
        ])
        by_code = {e.unit_code: e for e in result.entries}
        assert (by_code["BCS 113"].time_start, by_code["BCS 113"].time_end) == ("07:00:00", "10:00:00")
        assert by_code["BCS 113"].day == "MONDAY"
        assert by_code["BIT 210"].time_start == "10:00:00"

    def test_rows_before_first_slot_and_blank_rows_skipped(self):
        result = _parse([
            [None, "BCB 105 - LR1 / A", None, None],
            [None, None, None, None],
            ["07:00 - 10:00", None, "BIT 314 - ICT1 / B", None],
        ])
        assert [e.unit_code for e in result.entries] == ["BIT 314"]

    def test_multiple_classes_in_one_cell(self):
        result = _parse([["07:00 - 10:00", "BCB 105 - LR1 / A\nBCS 113 - LT2 / B", None, None]])
        assert [e.unit_code for e in result.entries] == ["BCB 105", "BCS 113"]
        assert all(e.day == "MONDAY" and e.time_start == "07:00:00" for e in result.entries)
        assert [e.venue for e in result.entries] == ["LR1", "LT2"]

    def test_cross_listed_codes_share_venue_and_lecturer(self):
        result = _parse([["07:00 - 10:00", None, "BIT 113/BCS 110 - ICT1 / LECTURER", None]])
        assert len(result.entries) == 2
        assert [e.unit_code for e in result.entries] == ["BIT 113", "BCS 110"]
        assert all(e.venue == "ICT1" for e in result.entries)
        assert all(e.lecturer == "LECTURER" for e in result.entries)
        assert all(e.day == "TUESDAY" for e in result.entries)
        assert set(result.units) == {"BIT 113", "BCS 110"}

    def test_three_way_cross_listing(self):
        result = _parse([["07:00 - 10:00", "BIT 113/BCS 110/CSE 110 - ICT1 / LECTURER", None, None]])
        assert [e.unit_code for e in result.entries] == ["BIT 113", "BCS 110", "CSE 110"]

    def test_short_fragments_dropped(self):
        result = _parse([["07:00 - 10:00", "NIL", "-", "BCB 105 - LR1"]])
        assert [e.unit_code for e in result.entries] == ["BCB 105"]

    def test_fallback_for_non_standard_code(self):
        result = _parse([["07:00 - 10:00", "CS10 LT 3 JOHN DOE", None, None]])
        entry = result.entries[0]
        assert entry.unit_code == "CS10"
        assert entry.venue == "LT 3"
        assert entry.lecturer == "JOHN DOE"
        assert result.units["CS10"].department == "CS"

    def test_notices_are_not_units(self):
        result = _parse([["07:00 - 10:00", "BREAK 10:30", "ROOM 12 CLOSED", "WEEK 5 - HOLIDAY"]])
        assert result.entries == []
        assert result.units == {}

    def test_session_type_from_fragment(self):
        result = _parse([["10:00 - 13:00", None, "BCB 204 - LAB / Dr. Smith", None]])
        assert result.entries[0].session_type == SessionType.LAB

    def test_first_seen_unit_wins(self):
        result = _parse([
            ["07:00 - 10:00", "BCB 105 - LR1 / A", "BCB 105 - LR2 / B", None],
        ])
        assert len(result.entries) == 2
        assert len(result.units) == 1

    def test_no_day_header_raises(self):
        with pytest.raises(ValueError, match="Could not find day columns"):
            parse([["Unit", "Time"], ["BCB 105", "07:00 - 10:00"]], 1, 2025, "kfu")
