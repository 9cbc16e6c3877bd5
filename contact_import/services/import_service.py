"""
Import reconciliation service.

Turns confirmed column mappings and raw spreadsheet rows into a plan
of contact creates, merges and skips against the existing contacts.

Key flow:
  1. Validate the mapping set (no two columns may target one field)
  2. Normalize each row → candidate contact (type coercion, agent lookup)
  3. Validate candidates: some identity data, well-formed email
  4. Classify: match by email (case-insensitive) → phone (digits only)
     → create / merge / skip
  5. Merge values on write: incoming wins only when non-blank and different

The engine never writes. The plan reflects a snapshot of the existing
contacts; the caller owns applying it safely (single writer, or an
idempotent upsert keyed by email/phone).
"""

import logging
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import datetime, timezone
from typing import Any, Literal

from contact_import.core.config import settings
from contact_import.core.exceptions import DirectoryUnavailableError, MappingValidationError
from contact_import.core.field_catalog import require_catalog
from contact_import.schemas.fields import ConfirmedFieldMapping, ContactFieldDefinition
from contact_import.schemas.imports import (
    CandidateContact,
    DirectoryEntry,
    ExistingContact,
    InvalidCandidate,
    MappingValidationResult,
    MergeCandidate,
    ReconciliationPlan,
    SkippedCandidate,
)
from contact_import.services.normalization import (
    coerce_value,
    digits_only,
    is_blank,
    is_valid_email,
    values_match,
)

logger = logging.getLogger(__name__)

IDENTITY_FIELDS = ("firstName", "lastName", "email", "phone")

REASON_MISSING_DATA = "Missing required data (name, email, or phone)"
REASON_INVALID_EMAIL = "Invalid email format"
REASON_EMPTY_ROW = "empty row"
REASON_IDENTICAL = "identical to existing"
REASON_DUPLICATE = "duplicate"

DeduplicationMode = Literal["merge", "skip"]


# ─── Mapping Validation ───────────────────────────────────────

def validate_mappings(
    mappings: Sequence[ConfirmedFieldMapping],
    catalog: Iterable[ContactFieldDefinition],
) -> MappingValidationResult:
    """
    Check a confirmed mapping set before any row is processed.

    Two columns targeting the same field is ambiguous and is reported,
    never resolved by picking one.
    """
    known_ids = {f.id for f in require_catalog(catalog)}
    errors: list[str] = []

    counts = Counter(m.target_field_id for m in mappings)
    duplicates = [field_id for field_id, count in counts.items() if count > 1]
    if duplicates:
        errors.append(f"Duplicate mappings found for: {', '.join(duplicates)}")

    unknown = [m.target_field_id for m in mappings if m.target_field_id not in known_ids]
    for field_id in dict.fromkeys(unknown):
        errors.append(f"Unknown target field: {field_id}")

    return MappingValidationResult(valid=not errors, errors=errors)


# ─── Row Normalization ────────────────────────────────────────

def build_agent_lookup(directory: Iterable[DirectoryEntry] | None) -> dict[str, str]:
    """Lower-cased email → user id. The first entry wins for a repeated email."""
    if directory is None:
        raise DirectoryUnavailableError("User directory is unavailable")
    lookup: dict[str, str] = {}
    for entry in directory:
        key = entry.email.strip().lower()
        if key and key not in lookup:
            lookup[key] = entry.id
    return lookup


def resolve_agent(value: str, agent_lookup: dict[str, str]) -> str:
    """Agent email → user id, or the unassigned sentinel on a miss."""
    return agent_lookup.get(value.strip().lower(), settings.UNASSIGNED_AGENT)


def process_rows_for_import(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    mappings: Sequence[ConfirmedFieldMapping],
    directory: Iterable[DirectoryEntry] | None,
    catalog: Iterable[ContactFieldDefinition],
    row_numbers: Sequence[int] | None = None,
) -> list[CandidateContact]:
    """
    Apply confirmed mappings and type coercion to every row.

    Blank or uncoercible cells are omitted, never stored as "".
    Rows that yield no field at all are dropped.

    row_numbers gives the spreadsheet row of each data row (see
    SheetData.row_numbers); without it data row i is taken to be
    spreadsheet row i + 2.
    """
    if row_numbers is not None and len(row_numbers) != len(rows):
        raise ValueError(
            f"row_numbers has {len(row_numbers)} entries for {len(rows)} rows"
        )
    field_types = {f.id: f.data_type for f in require_catalog(catalog)}
    agent_lookup = build_agent_lookup(directory)

    # Resolve column positions once; unknown headers are skipped
    columns: list[tuple[int, str, str]] = []
    for mapping in mappings:
        try:
            col_idx = list(headers).index(mapping.source_header)
        except ValueError:
            logger.debug("Mapped header %r not in file; skipping", mapping.source_header)
            continue
        value_type = mapping.target_field_type or field_types.get(mapping.target_field_id, "text")
        columns.append((col_idx, mapping.target_field_id, value_type))

    candidates: list[CandidateContact] = []
    unassigned = 0
    for row_idx, row in enumerate(rows):
        fields: dict[str, str] = {}
        for col_idx, field_id, value_type in columns:
            raw_value = row[col_idx] if col_idx < len(row) else None
            value = coerce_value(raw_value, value_type)
            if value is None:
                continue
            if field_id == settings.AGENT_FIELD_ID:
                value = resolve_agent(value, agent_lookup)
                if value == settings.UNASSIGNED_AGENT:
                    unassigned += 1
            fields[field_id] = value

        if fields:
            # Header is row 1, so data row i lives at spreadsheet row i + 2
            row_number = row_numbers[row_idx] if row_numbers is not None else row_idx + 2
            candidates.append(CandidateContact(row_number=row_number, fields=fields))

    logger.info(
        "Processed %d candidates from %d rows (%d unassigned agents)",
        len(candidates), len(rows), unassigned,
    )
    return candidates


# ─── Candidate Validation ─────────────────────────────────────

def validate_candidates(
    candidates: Sequence[CandidateContact],
    email_field_ids: Iterable[str] = ("email",),
) -> tuple[list[CandidateContact], list[InvalidCandidate]]:
    """Split candidates into valid and invalid (with a reason each)."""
    email_fields = tuple(email_field_ids)
    valid: list[CandidateContact] = []
    invalid: list[InvalidCandidate] = []

    for candidate in candidates:
        if all(is_blank(candidate.get(f)) for f in IDENTITY_FIELDS):
            invalid.append(InvalidCandidate(candidate=candidate, reason=REASON_MISSING_DATA))
            continue
        bad_email = any(
            not is_blank(candidate.get(f)) and not is_valid_email(candidate.get(f))
            for f in email_fields
        )
        if bad_email:
            invalid.append(InvalidCandidate(candidate=candidate, reason=REASON_INVALID_EMAIL))
            continue
        valid.append(candidate)

    return valid, invalid


# ─── Duplicate Lookup ─────────────────────────────────────────

class ContactIndex:
    """
    Email and phone lookup over a snapshot of existing contacts.

    Within one key the first contact in input order wins. When email
    and phone point at different contacts, the email match is used.
    """

    def __init__(self, contacts: Iterable[ExistingContact]):
        self._by_email: dict[str, ExistingContact] = {}
        self._by_phone: dict[str, ExistingContact] = {}
        for contact in contacts:
            if contact.email and contact.email.strip():
                self._by_email.setdefault(contact.email.strip().lower(), contact)
            phone = digits_only(contact.phone)
            if len(phone) >= settings.PHONE_MATCH_MIN_DIGITS:
                self._by_phone.setdefault(phone, contact)

    def find(self, candidate: CandidateContact) -> ExistingContact | None:
        email = (candidate.get("email") or "").strip().lower()
        phone = digits_only(candidate.get("phone"))

        by_email = self._by_email.get(email) if email else None
        by_phone = (
            self._by_phone.get(phone)
            if len(phone) >= settings.PHONE_MATCH_MIN_DIGITS
            else None
        )
        if by_email is not None and by_phone is not None and by_email.id != by_phone.id:
            logger.warning(
                "Row %d matches contact %s by email and %s by phone; using email match",
                candidate.row_number, by_email.id, by_phone.id,
            )
        return by_email or by_phone


# ─── Classification ───────────────────────────────────────────

def is_identical(
    candidate: CandidateContact,
    existing: ExistingContact,
    mapped_field_ids: Iterable[str],
) -> bool:
    """
    True when merging would change nothing.

    Fields the candidate leaves blank can never overwrite, so only the
    values it actually supplies are compared.
    """
    for field_id in mapped_field_ids:
        value = candidate.get(field_id)
        if is_blank(value):
            continue
        if not values_match(value, existing.get(field_id)):
            return False
    return True


def classify_candidates(
    candidates: Sequence[CandidateContact],
    existing_contacts: Iterable[ExistingContact],
    mapped_field_ids: Iterable[str],
    deduplication_mode: DeduplicationMode = "merge",
) -> ReconciliationPlan:
    """
    Place each valid candidate in exactly one of create / merge / skip.

    In "skip" mode a candidate matching an existing contact is never
    merged; it is skipped as a duplicate unless it is identical.
    """
    if deduplication_mode not in ("merge", "skip"):
        raise ValueError(f"Unknown deduplication mode: {deduplication_mode}")
    mapped = list(dict.fromkeys(mapped_field_ids))
    index = ContactIndex(existing_contacts)
    plan = ReconciliationPlan()

    for candidate in candidates:
        if all(is_blank(candidate.get(f)) for f in mapped):
            plan.will_skip.append(SkippedCandidate(candidate=candidate, reason=REASON_EMPTY_ROW))
            continue

        existing = index.find(candidate)
        if existing is None:
            plan.will_create.append(candidate)
        elif is_identical(candidate, existing, mapped):
            plan.will_skip.append(SkippedCandidate(candidate=candidate, reason=REASON_IDENTICAL))
        elif deduplication_mode == "skip":
            plan.will_skip.append(SkippedCandidate(candidate=candidate, reason=REASON_DUPLICATE))
        else:
            plan.will_merge.append(MergeCandidate(candidate=candidate, existing=existing))

    return plan


# ─── Merge / Create Values ────────────────────────────────────

def merge_contact(
    existing: ExistingContact,
    candidate: CandidateContact,
    updated_at: datetime | None = None,
) -> dict[str, Any]:
    """
    Resolve merged values for an existing contact.

    Incoming values win only when non-blank and different; nothing is
    ever blanked. Returns a flat record ready to persist.
    """
    merged = existing.to_record()
    changed: list[str] = []
    for field_id, value in candidate.fields.items():
        if is_blank(value):
            continue
        if values_match(value, merged.get(field_id)):
            continue
        merged[field_id] = value.strip()
        changed.append(field_id)

    if updated_at is not None:
        merged["updatedAt"] = updated_at.isoformat()

    logger.debug("Merged row %d into %s: %s", candidate.row_number, existing.id, changed)
    return merged


def prepare_new_contact(
    candidate: CandidateContact,
    created_on: datetime | None = None,
) -> dict[str, Any]:
    """Record for a create; stamps createdOn when the row didn't provide one."""
    record: dict[str, Any] = dict(candidate.fields)
    if is_blank(record.get("createdOn")):
        record["createdOn"] = (created_on or datetime.now(timezone.utc)).isoformat()
    return record


# ─── Full Pass ────────────────────────────────────────────────

def reconcile_import(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    mappings: Sequence[ConfirmedFieldMapping],
    catalog: Iterable[ContactFieldDefinition] | None,
    directory: Iterable[DirectoryEntry] | None,
    existing_contacts: Iterable[ExistingContact],
    deduplication_mode: DeduplicationMode = "merge",
    row_numbers: Sequence[int] | None = None,
) -> ReconciliationPlan:
    """
    Build the reconciliation plan for one import.

    Raises on structural problems (catalog, directory, mapping set).
    Per-row problems land on plan.errors / plan.invalid.
    """
    fields = require_catalog(catalog)

    validation = validate_mappings(mappings, fields)
    if not validation.valid:
        raise MappingValidationError(validation.errors)

    field_types = {f.id: f.data_type for f in fields}
    # The agent column holds a resolved user id by validation time
    email_field_ids = [
        m.target_field_id
        for m in mappings
        if (m.target_field_type or field_types.get(m.target_field_id)) == "email"
        and m.target_field_id != settings.AGENT_FIELD_ID
    ]

    candidates = process_rows_for_import(
        headers, rows, mappings, directory, fields, row_numbers=row_numbers,
    )
    valid, invalid = validate_candidates(candidates, email_field_ids)
    plan = classify_candidates(
        valid,
        existing_contacts,
        [m.target_field_id for m in mappings],
        deduplication_mode=deduplication_mode,
    )

    plan.invalid = invalid
    plan.errors = [f"Row {ic.candidate.row_number}: {ic.reason}" for ic in invalid]

    summary = plan.summary()
    logger.info(
        "Reconciled %d rows: %d create, %d merge, %d skip, %d invalid",
        len(rows), summary.to_create, summary.to_merge, summary.to_skip, summary.invalid,
    )
    return plan
