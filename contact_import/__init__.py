"""Spreadsheet field detection and contact import reconciliation."""

from contact_import.core.field_catalog import CORE_FIELDS, FieldCatalog
from contact_import.services.field_matcher import FieldMatcher
from contact_import.services.import_service import merge_contact, reconcile_import

__all__ = ["CORE_FIELDS", "FieldCatalog", "FieldMatcher", "merge_contact", "reconcile_import"]
