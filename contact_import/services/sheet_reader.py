"""
Spreadsheet decoding.

Turns uploaded CSV/Excel bytes into the header + row grid the
detection and reconciliation services consume. Every cell comes back
as a stripped string; fully blank rows are dropped, and each kept row
remembers the spreadsheet row it came from.
"""

import csv
import io
from datetime import date, datetime
from typing import Any

import openpyxl
from pydantic import BaseModel, Field, model_validator


class SheetData(BaseModel):
    """Decoded spreadsheet: the header row plus the data rows below it."""
    headers: list[str]
    rows: list[list[str]] = Field(default_factory=list)
    row_numbers: list[int] = Field(
        default_factory=list,
        description="1-indexed spreadsheet row of each entry in rows",
    )

    @model_validator(mode="after")
    def _default_row_numbers(self) -> "SheetData":
        if not self.row_numbers:
            self.row_numbers = list(range(2, len(self.rows) + 2))
        elif len(self.row_numbers) != len(self.rows):
            raise ValueError("row_numbers must align with rows")
        return self

    def sample_rows(self, limit: int = 5) -> list[list[str]]:
        return self.rows[:limit]


def _cell_to_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _align(values: list[str], width: int) -> list[str]:
    """Pad or trim a row to the header width."""
    if len(values) < width:
        return values + [""] * (width - len(values))
    return values[:width]


def parse_excel(file_bytes: bytes, header_row: int = 1) -> SheetData:
    """Parse the active worksheet of an .xlsx file."""
    wb = openpyxl.load_workbook(io.BytesIO(file_bytes), read_only=True, data_only=True)
    try:
        ws = wb.active
        rows_iter = ws.iter_rows(min_row=header_row, values_only=True)
        header_row_values = next(rows_iter, None)
        if not header_row_values:
            raise ValueError(f"No header row found at row {header_row}")

        headers = [_cell_to_str(h) for h in header_row_values]
        rows: list[list[str]] = []
        row_numbers: list[int] = []
        for row_number, row_values in enumerate(rows_iter, start=header_row + 1):
            if not row_values or all(_cell_to_str(v) == "" for v in row_values):
                continue
            rows.append(_align([_cell_to_str(v) for v in row_values], len(headers)))
            row_numbers.append(row_number)
    finally:
        wb.close()

    return SheetData(headers=headers, rows=rows, row_numbers=row_numbers)


def parse_csv(file_bytes: bytes, header_row: int = 1) -> SheetData:
    """Parse a UTF-8 CSV file (with or without BOM)."""
    text_content = file_bytes.decode("utf-8-sig")
    reader = csv.reader(io.StringIO(text_content))

    for _ in range(header_row - 1):
        next(reader, None)
    header_row_values = next(reader, None)
    if not header_row_values:
        raise ValueError(f"No header row found at row {header_row}")

    headers = [h.strip() for h in header_row_values]
    rows: list[list[str]] = []
    row_numbers: list[int] = []
    # Row numbers count CSV records, so a quoted multi-line cell is one row
    for row_number, row_values in enumerate(reader, start=header_row + 1):
        if not row_values or all(v.strip() == "" for v in row_values):
            continue
        rows.append(_align([v.strip() for v in row_values], len(headers)))
        row_numbers.append(row_number)

    return SheetData(headers=headers, rows=rows, row_numbers=row_numbers)


def read_sheet(file_bytes: bytes, file_type: str, header_row: int = 1) -> SheetData:
    """Dispatch on file type: 'csv' or 'excel'."""
    if file_type == "csv":
        return parse_csv(file_bytes, header_row)
    if file_type == "excel":
        return parse_excel(file_bytes, header_row)
    raise ValueError(f"Unsupported file type: {file_type}")
