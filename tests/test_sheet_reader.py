"""Tests for CSV/Excel decoding."""

import io

import openpyxl
import pytest

from contact_import.services.sheet_reader import SheetData, parse_csv, parse_excel, read_sheet
from tests.fixtures.contact_sheet_factory import (
    CONTACT_HEADERS,
    make_contact_export_csv,
    make_contact_export_excel,
)


# ─── CSV ──────────────────────────────────────────────────────

class TestParseCsv:
    def test_headers_without_bom(self):
        sheet = parse_csv(make_contact_export_csv(3))
        assert sheet.headers == CONTACT_HEADERS

    def test_blank_rows_dropped(self):
        sheet = parse_csv(make_contact_export_csv(3))
        assert len(sheet.rows) == 3
        assert sheet.rows[0][0] == "Bruno"

    def test_rows_padded_to_header_width(self):
        sheet = parse_csv(b"A,B,C\n1\n4,5,6,7\n")
        assert sheet.rows == [["1", "", ""], ["4", "5", "6"]]

    def test_cells_stripped(self):
        sheet = parse_csv(b" Name , Email \n Jon , j@x.com \n")
        assert sheet.headers == ["Name", "Email"]
        assert sheet.rows == [["Jon", "j@x.com"]]

    def test_header_row_offset(self):
        sheet = parse_csv(b"Exported 2024\nName\nJon\n", header_row=2)
        assert sheet.headers == ["Name"]
        assert sheet.rows == [["Jon"]]

    def test_empty_file(self):
        with pytest.raises(ValueError, match="No header row"):
            parse_csv(b"")

    def test_sample_rows(self):
        sheet = parse_csv(make_contact_export_csv(8))
        assert len(sheet.sample_rows()) == 5
        assert len(sheet.sample_rows(2)) == 2


# ─── Excel ────────────────────────────────────────────────────

class TestParseExcel:
    def test_headers(self):
        sheet = parse_excel(make_contact_export_excel(4))
        assert sheet.headers == CONTACT_HEADERS

    def test_blank_rows_dropped(self):
        sheet = parse_excel(make_contact_export_excel(4))
        assert len(sheet.rows) == 4

    def test_extra_columns(self):
        data = make_contact_export_excel(3, extra_columns={"Deal Size": [1200, 15000.5]})
        sheet = parse_excel(data)
        assert sheet.headers[-1] == "Deal Size"
        assert [r[-1] for r in sheet.rows] == ["15000.5", "1200", "15000.5"]

    def test_integral_floats_rendered_as_ints(self):
        data = make_contact_export_excel(2, extra_columns={"Score": [3.0]})
        sheet = parse_excel(data)
        assert [r[-1] for r in sheet.rows] == ["3", "3"]


# ─── Dispatch ─────────────────────────────────────────────────

def test_read_sheet_dispatch():
    assert read_sheet(make_contact_export_csv(2), "csv").headers == CONTACT_HEADERS
    assert read_sheet(make_contact_export_excel(2), "excel").headers == CONTACT_HEADERS


def test_read_sheet_unsupported():
    with pytest.raises(ValueError, match="Unsupported file type"):
        read_sheet(b"{}", "json")


# ─── Source Row Numbers ───────────────────────────────────────

class TestRowNumbers:
    def test_csv_skips_dropped_blank_rows(self):
        # header row 1, blank row 2, data from row 3
        sheet = parse_csv(make_contact_export_csv(3))
        assert sheet.row_numbers == [3, 4, 5]

    def test_csv_blank_row_in_middle(self):
        sheet = parse_csv(b"Name\nAnn\n,\n\nBob\n")
        assert sheet.rows == [["Ann"], ["Bob"]]
        assert sheet.row_numbers == [2, 5]

    def test_csv_header_row_offset(self):
        sheet = parse_csv(b"Exported 2024\nName\nJon\n", header_row=2)
        assert sheet.row_numbers == [3]

    def test_excel(self):
        sheet = parse_excel(make_contact_export_excel(3))
        assert sheet.row_numbers == [2, 3, 4]

    def test_excel_header_row_offset(self):
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["Contacts export"])
        ws.append(["Name", "Email"])
        ws.append(["Ann", "ann@b.com"])
        ws.append([None, None])
        ws.append(["Bob", "bob@b.com"])
        buf = io.BytesIO()
        wb.save(buf)

        sheet = parse_excel(buf.getvalue(), header_row=2)
        assert sheet.headers == ["Name", "Email"]
        assert sheet.rows == [["Ann", "ann@b.com"], ["Bob", "bob@b.com"]]
        assert sheet.row_numbers == [3, 5]

    def test_default_row_numbers(self):
        sheet = SheetData(headers=["Name"], rows=[["Ann"], ["Bob"]])
        assert sheet.row_numbers == [2, 3]

    def test_misaligned_row_numbers_rejected(self):
        with pytest.raises(ValueError):
            SheetData(headers=["Name"], rows=[["Ann"]], row_numbers=[2, 3])
