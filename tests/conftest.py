"""
Shared test fixtures.

The engine is pure computation, so fixtures are plain in-memory
catalogs, directories and contact snapshots.
"""

import uuid

import pytest

from contact_import.core.field_catalog import FieldCatalog
from contact_import.schemas.fields import ConfirmedFieldMapping
from contact_import.schemas.imports import CandidateContact, DirectoryEntry, ExistingContact
from tests.fixtures.contact_sheet_factory import STANDARD_CONTACT_MAPPINGS


@pytest.fixture
def catalog() -> FieldCatalog:
    """Core fields only."""
    return FieldCatalog()


@pytest.fixture
def catalog_with_custom() -> FieldCatalog:
    """Core fields plus a few user-created ones."""
    cat = FieldCatalog()
    cat.create_custom_field("Company", "text")
    cat.create_custom_field("Deal Size", "number")
    cat.create_custom_field("Newsletter Opt In", "checkbox")
    return cat


@pytest.fixture
def directory() -> list[DirectoryEntry]:
    return [
        DirectoryEntry(id="u1", email="rep1@co.com"),
        DirectoryEntry(id="u2", email="rep2@co.com"),
    ]


@pytest.fixture
def standard_mappings() -> list[ConfirmedFieldMapping]:
    return [ConfirmedFieldMapping(**m) for m in STANDARD_CONTACT_MAPPINGS]


# ─── Helper factories ─────────────────────────────────────────

@pytest.fixture
def make_existing():
    """Factory fixture for existing contacts."""
    def _make(
        email: str | None = None,
        phone: str | None = None,
        **fields,
    ) -> ExistingContact:
        return ExistingContact(
            id=f"c-{uuid.uuid4().hex[:8]}",
            email=email,
            phone=phone,
            fields=fields,
        )
    return _make


@pytest.fixture
def make_candidate():
    """Factory fixture for candidate contacts."""
    counter = {"row": 1}

    def _make(**fields) -> CandidateContact:
        counter["row"] += 1
        return CandidateContact(row_number=counter["row"], fields=fields)
    return _make
