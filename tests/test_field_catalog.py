"""Tests for the contact field catalog: core seeding and custom-field lifecycle."""

import pytest

from contact_import.core.exceptions import CatalogUnavailableError, FieldCatalogError
from contact_import.core.field_catalog import (
    CORE_FIELDS,
    FieldCatalog,
    derive_field_id,
    require_catalog,
)
from contact_import.core.keywords import FIELD_KEYWORDS, get_field_keywords


# ─── Core Fields ───────────────────────────────────────────────

def test_core_fields_seeded_in_order(catalog):
    assert [f.id for f in catalog] == [
        "firstName", "lastName", "email", "phone", "agentUid", "createdOn",
    ]
    assert all(f.is_core for f in catalog)


def test_core_field_types():
    types = {f.id: f.data_type for f in CORE_FIELDS}
    assert types["email"] == "email"
    assert types["phone"] == "phone"
    assert types["createdOn"] == "datetime"
    assert types["agentUid"] == "text"


def test_catalog_from_definitions_rejects_duplicate_ids():
    with pytest.raises(FieldCatalogError):
        FieldCatalog([CORE_FIELDS[0], CORE_FIELDS[0]])


# ─── Custom Fields ─────────────────────────────────────────────

class TestDeriveFieldId:
    def test_basic(self):
        assert derive_field_id("Lead Source") == "lead_source"

    def test_whitespace_runs(self):
        assert derive_field_id("  Deal   Size ") == "deal_size"


class TestCustomFieldLifecycle:
    def test_create(self, catalog):
        field = catalog.create_custom_field("Lead Source", "text")
        assert field.id == "lead_source"
        assert field.is_core is False
        assert "lead_source" in catalog
        assert catalog.custom_fields == [field]

    def test_create_collision(self, catalog):
        catalog.create_custom_field("Lead Source")
        with pytest.raises(FieldCatalogError, match="already exists"):
            catalog.create_custom_field("lead   source")

    def test_create_collision_with_core(self, catalog):
        with pytest.raises(FieldCatalogError):
            catalog.create_custom_field("Email")

    def test_create_empty_label(self, catalog):
        with pytest.raises(FieldCatalogError):
            catalog.create_custom_field("   ")

    def test_update_keeps_id(self, catalog):
        catalog.create_custom_field("Deal Size", "text")
        updated = catalog.update_custom_field("deal_size", label="Deal Value", data_type="number")
        assert updated.id == "deal_size"
        assert updated.label == "Deal Value"
        assert catalog.get("deal_size").data_type == "number"

    def test_update_core_rejected(self, catalog):
        with pytest.raises(FieldCatalogError, match="core"):
            catalog.update_custom_field("email", label="E-mail")

    def test_update_unknown(self, catalog):
        with pytest.raises(FieldCatalogError, match="not found"):
            catalog.update_custom_field("nope", label="Nope")

    def test_delete(self, catalog):
        catalog.create_custom_field("Company")
        catalog.delete_custom_field("company")
        assert "company" not in catalog
        assert len(catalog) == len(CORE_FIELDS)

    def test_delete_core_rejected(self, catalog):
        with pytest.raises(FieldCatalogError):
            catalog.delete_custom_field("phone")
        assert "phone" in catalog


# ─── Systemic Guards ───────────────────────────────────────────

def test_require_catalog_none():
    with pytest.raises(CatalogUnavailableError):
        require_catalog(None)


def test_require_catalog_empty():
    with pytest.raises(CatalogUnavailableError):
        require_catalog([])


def test_require_catalog_materializes(catalog):
    assert require_catalog(catalog) == list(catalog)


# ─── Keyword Table ─────────────────────────────────────────────

def test_keyword_table_is_read_only():
    with pytest.raises(TypeError):
        FIELD_KEYWORDS["firstName"] = ("nope",)


def test_keywords_for_custom_field_are_empty():
    assert get_field_keywords("deal_size") == ()
    assert "surname" in get_field_keywords("lastName")
