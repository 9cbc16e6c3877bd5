"""
Factory for generating contact export files for import tests.

Creates realistic CRM export data: names, e-mail, phone, owning agent
and creation date, as produced by a typical "export contacts" button.
"""

import csv
import io
from typing import Any

import openpyxl

CONTACT_HEADERS = [
    "First Name",
    "Last Name",
    "E-mail Address",
    "Phone Number",
    "Agent",
    "Created",
]

FIRST_NAMES = ["Alice", "Bruno", "Chen", "Dana", "Emeka", "Farah", "Gus"]
LAST_NAMES = ["Nguyen", "Okafor", "Silva", "Becker", "Haddad", "Kowalski"]
AGENTS = ["rep1@co.com", "REP2@co.com", "ghost@nowhere.com"]


def make_contact_rows(num_contacts: int = 20) -> list[list[str]]:
    """Rows aligned to CONTACT_HEADERS; phones have ten digits."""
    rows = []
    for i in range(1, num_contacts + 1):
        first = FIRST_NAMES[i % len(FIRST_NAMES)]
        last = LAST_NAMES[i % len(LAST_NAMES)]
        rows.append([
            first,
            last,
            f"{first.lower()}.{last.lower()}{i}@example.com",
            f"(555) {i:03d}-{1000 + i:04d}",
            AGENTS[i % len(AGENTS)],
            f"2024-01-{(i % 28) + 1:02d}",
        ])
    return rows


def make_contact_export_excel(
    num_contacts: int = 20,
    extra_columns: dict[str, list[Any]] | None = None,
) -> bytes:
    """Generate a contact export .xlsx file."""
    wb = openpyxl.Workbook()
    ws = wb.active
    ws.title = "Contacts"

    headers = list(CONTACT_HEADERS)
    if extra_columns:
        headers.extend(extra_columns.keys())
    ws.append(headers)

    for i, row in enumerate(make_contact_rows(num_contacts), start=1):
        if extra_columns:
            for values in extra_columns.values():
                row.append(values[i % len(values)] if values else "")
        ws.append(row)

    # A blank spacer row, as real exports often have
    ws.append([None] * len(headers))

    buf = io.BytesIO()
    wb.save(buf)
    buf.seek(0)
    return buf.getvalue()


def make_contact_export_csv(num_contacts: int = 20) -> bytes:
    """Generate a contact export CSV file with a UTF-8 BOM."""
    buf = io.StringIO()
    writer = csv.writer(buf)
    writer.writerow(CONTACT_HEADERS)
    writer.writerow([""] * len(CONTACT_HEADERS))
    for row in make_contact_rows(num_contacts):
        writer.writerow(row)
    return buf.getvalue().encode("utf-8-sig")


STANDARD_CONTACT_MAPPINGS = [
    {"source_header": "First Name", "target_field_id": "firstName"},
    {"source_header": "Last Name", "target_field_id": "lastName"},
    {"source_header": "E-mail Address", "target_field_id": "email"},
    {"source_header": "Phone Number", "target_field_id": "phone"},
    {"source_header": "Agent", "target_field_id": "agentUid"},
    {"source_header": "Created", "target_field_id": "createdOn"},
]
