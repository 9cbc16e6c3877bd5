"""Pydantic schemas for the contact field catalog and field detection."""

from typing import Literal

from pydantic import BaseModel, Field

FieldDataType = Literal["text", "email", "phone", "number", "datetime", "checkbox"]
FieldClassification = Literal["core", "custom"]


# ─── Field Catalog ────────────────────────────────────────────

class ContactFieldDefinition(BaseModel):
    """
    A contact attribute known to the CRM.

    Core fields are system-defined and immutable. Custom fields are
    created by users with an id derived from their label.
    """
    id: str = Field(..., min_length=1)
    label: str = Field(..., min_length=1)
    data_type: FieldDataType = "text"
    is_core: bool = False


# ─── Detection ────────────────────────────────────────────────

class DetectedFieldMapping(BaseModel):
    """Suggested target field for one spreadsheet column."""
    source_header: str
    target_field_id: str = Field(
        "",
        description="Suggested field id; empty when nothing cleared the threshold",
    )
    confidence: int = Field(0, ge=0, le=100)
    classification: FieldClassification = "custom"
    sample_values: list[str] = Field(default_factory=list, max_length=3)


class ConfirmedFieldMapping(BaseModel):
    """
    A mapping accepted (or edited) by the user.

    Same shape as DetectedFieldMapping, but the target is mandatory.
    target_field_type overrides the catalog type for value coercion.
    """
    source_header: str
    target_field_id: str = Field(..., min_length=1)
    confidence: int = Field(0, ge=0, le=100)
    classification: FieldClassification = "custom"
    sample_values: list[str] = Field(default_factory=list)
    target_field_type: FieldDataType | None = None


class FieldScore(BaseModel):
    """Breakdown of how a header scored against one candidate field."""
    field_id: str
    fuzzy_score: int = 0
    data_score: int = 0
    keyword_bonus: int = 0
    legacy_bonus: int = 0
    total: int = Field(0, ge=0, le=100)
    method: Literal["fuzzy", "fallback"] = "fuzzy"
