"""Pydantic schemas for import reconciliation."""

from typing import Any

from pydantic import BaseModel, Field

# Keys stored directly on ExistingContact rather than in its extension map.
WELL_KNOWN_KEYS = ("id", "email", "phone")


# ─── Collaborator Inputs ──────────────────────────────────────

class DirectoryEntry(BaseModel):
    """A user who can be assigned contacts."""
    id: str
    email: str


class ExistingContact(BaseModel):
    """
    A persisted contact.

    Only id, email and phone are guaranteed. Every other attribute
    (core or custom) lives in the open `fields` map, keyed by field id.
    """
    id: str
    email: str | None = None
    phone: str | None = None
    fields: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "ExistingContact":
        """Split a flat document into well-known keys and extension fields."""
        return cls(
            id=str(record["id"]),
            email=record.get("email"),
            phone=record.get("phone"),
            fields={k: v for k, v in record.items() if k not in WELL_KNOWN_KEYS},
        )

    def to_record(self) -> dict[str, Any]:
        """Flatten back into a document dict."""
        record: dict[str, Any] = {"id": self.id}
        if self.email is not None:
            record["email"] = self.email
        if self.phone is not None:
            record["phone"] = self.phone
        record.update(self.fields)
        return record

    def get(self, field_id: str) -> Any:
        if field_id in WELL_KNOWN_KEYS:
            return getattr(self, field_id)
        return self.fields.get(field_id)


# ─── Candidates ───────────────────────────────────────────────

class CandidateContact(BaseModel):
    """One spreadsheet row after mapping and type coercion."""
    row_number: int = Field(..., ge=1, description="1-indexed spreadsheet row (header is row 1)")
    fields: dict[str, str] = Field(default_factory=dict)

    def get(self, field_id: str) -> str | None:
        return self.fields.get(field_id)


class InvalidCandidate(BaseModel):
    candidate: CandidateContact
    reason: str


class SkippedCandidate(BaseModel):
    candidate: CandidateContact
    reason: str


class MergeCandidate(BaseModel):
    """A candidate paired with the existing contact it duplicates."""
    candidate: CandidateContact
    existing: ExistingContact


# ─── Plan ─────────────────────────────────────────────────────

class MappingValidationResult(BaseModel):
    valid: bool
    errors: list[str] = Field(default_factory=list)


class ImportSummary(BaseModel):
    """Counts shown to the user before the plan is committed."""
    to_create: int = 0
    to_merge: int = 0
    to_skip: int = 0
    invalid: int = 0


class ReconciliationPlan(BaseModel):
    """
    Create/merge/skip classification handed to the persistence layer.

    The plan reflects the existing contacts at the instant it was
    computed; the writer must not re-derive it, and must guard
    against contacts changing before it is applied.
    """
    will_create: list[CandidateContact] = Field(default_factory=list)
    will_merge: list[MergeCandidate] = Field(default_factory=list)
    will_skip: list[SkippedCandidate] = Field(default_factory=list)
    errors: list[str] = Field(default_factory=list)
    invalid: list[InvalidCandidate] = Field(default_factory=list)

    def summary(self) -> ImportSummary:
        return ImportSummary(
            to_create=len(self.will_create),
            to_merge=len(self.will_merge),
            to_skip=len(self.will_skip),
            invalid=len(self.invalid),
        )
