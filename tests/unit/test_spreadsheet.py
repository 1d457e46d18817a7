from __future__ import annotations

import pytest

from brc_navigator.data_ingestion.spreadsheet import Row, Spreadsheet
from brc_navigator.errors import ParseError


def test_rows_are_aligned_to_headers():
    sheet = Spreadsheet.from_values(["A", "B"], [["1"], ["1", "2", "3"], [None, 5]])
    assert [r.cells for r in sheet.rows] == [("1", ""), ("1", "2"), ("", "5")]
    assert [r.position for r in sheet.rows] == [0, 1, 2]


def test_row_get_by_position_or_header():
    row = Row(position=0, cells=("Yoga", "yoga"))
    headers = ("Title", "Type")
    assert row.get(0) == "Yoga"
    assert row.get(5) == ""
    assert row.get("type", headers) == "yoga"
    assert row.get(" TITLE ", headers) == "Yoga"
    assert row.get("Camp", headers) == ""
    with pytest.raises(TypeError):
        row.get("Title")


def test_from_records_uses_first_record_as_headers():
    sheet = Spreadsheet.from_records([["Title", "Type"], ["Yoga", "yoga"]])
    assert sheet.headers == ("Title", "Type")
    assert sheet.rows == [Row(position=0, cells=("Yoga", "yoga"))]


def test_header_only_sheet_has_no_rows():
    sheet = Spreadsheet.from_records([["Title", "Type"]])
    assert sheet.headers == ("Title", "Type")
    assert sheet.rows == []


@pytest.mark.parametrize("records", [[], [["", ""]]])
def test_missing_header_row_is_a_parse_error(records):
    with pytest.raises(ParseError):
        Spreadsheet.from_records(records)


def test_column_lookup_and_uid_index():
    sheet = Spreadsheet.from_values(["Title", "Type", "UID"], [])
    assert sheet.column_index("type") == 1
    assert sheet.column_index("missing") == -1
    assert sheet.uid_column_index == 2


def test_row_at_only_accepts_valid_positions():
    sheet = Spreadsheet.from_values(["A"], [["x"], ["y"]])
    assert sheet.row_at(1).cells == ("y",)
    assert sheet.row_at(2) is None
    assert sheet.row_at(-1) is None
    assert sheet.row_at(True) is None
    assert sheet.row_at("1") is None


def test_row_access_by_column():
    row = Row(position=0, cells=("Yoga", "yoga"))
    assert row[1] == "yoga"
    assert row[5] == ""
    assert row.as_dict(["Title", "Type"]) == {"Title": "Yoga", "Type": "yoga"}


def test_csv_snapshot_has_leading_row_index():
    sheet = Spreadsheet.from_values(["Title", "Type"], [["Yoga", "yoga"], ["Fire, Show", "perf"]])
    lines = sheet.to_csv().splitlines()
    assert lines[0] == "row_index,Title,Type"
    assert lines[1] == "0,Yoga,yoga"
    assert lines[2] == '1,"Fire, Show",perf'


def test_csv_snapshot_without_row_index():
    sheet = Spreadsheet.from_values(["Title"], [["Yoga"]])
    assert sheet.to_csv(include_row_index=False).splitlines() == ["Title", "Yoga"]
