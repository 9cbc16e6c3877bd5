"""
Contact field catalog.

Fields are application data, not schema. Six core fields are seeded
once and can never be retyped or deleted; custom fields are added on
demand with an id derived from their label.

Each field defines:
  - a stable id (the key used on contact records)
  - a human label (what the import wizard shows)
  - a data type (drives sample analysis and value coercion)
  - whether it is core or custom
"""

import logging
import re
from collections.abc import Iterable, Iterator

from contact_import.core.exceptions import CatalogUnavailableError, FieldCatalogError
from contact_import.schemas.fields import ContactFieldDefinition, FieldDataType

logger = logging.getLogger(__name__)


# ─── Core Fields ──────────────────────────────────────────────

CORE_FIELDS: tuple[ContactFieldDefinition, ...] = (
    ContactFieldDefinition(id="firstName", label="First Name", data_type="text", is_core=True),
    ContactFieldDefinition(id="lastName", label="Last Name", data_type="text", is_core=True),
    ContactFieldDefinition(id="email", label="Email", data_type="email", is_core=True),
    ContactFieldDefinition(id="phone", label="Phone", data_type="phone", is_core=True),
    ContactFieldDefinition(id="agentUid", label="Assigned Agent", data_type="text", is_core=True),
    ContactFieldDefinition(id="createdOn", label="Created Date", data_type="datetime", is_core=True),
)


def derive_field_id(label: str) -> str:
    """
    Custom field id from its label.
    'Lead Source' → 'lead_source'
    '  Deal   Size ' → 'deal_size'
    """
    return re.sub(r"\s+", "_", label.strip().lower())


# ─── Catalog ──────────────────────────────────────────────────

class FieldCatalog:
    """Ordered registry of contact field definitions."""

    def __init__(self, definitions: Iterable[ContactFieldDefinition] | None = None):
        self._fields: dict[str, ContactFieldDefinition] = {}
        seed = CORE_FIELDS if definitions is None else definitions
        for definition in seed:
            if definition.id in self._fields:
                raise FieldCatalogError(f'Field with ID "{definition.id}" already exists')
            self._fields[definition.id] = definition

    def __iter__(self) -> Iterator[ContactFieldDefinition]:
        return iter(self._fields.values())

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, field_id: object) -> bool:
        return field_id in self._fields

    def get(self, field_id: str) -> ContactFieldDefinition | None:
        return self._fields.get(field_id)

    @property
    def core_fields(self) -> list[ContactFieldDefinition]:
        return [f for f in self._fields.values() if f.is_core]

    @property
    def custom_fields(self) -> list[ContactFieldDefinition]:
        return [f for f in self._fields.values() if not f.is_core]

    def create_custom_field(
        self,
        label: str,
        data_type: FieldDataType = "text",
    ) -> ContactFieldDefinition:
        """Add a custom field; its id is derived from the label and must be unused."""
        field_id = derive_field_id(label)
        if not field_id:
            raise FieldCatalogError("Field label must not be empty")
        if field_id in self._fields:
            raise FieldCatalogError(f'Field with ID "{field_id}" already exists')

        definition = ContactFieldDefinition(
            id=field_id,
            label=label.strip(),
            data_type=data_type,
            is_core=False,
        )
        self._fields[field_id] = definition
        logger.info("Created custom field %s (%s)", field_id, data_type)
        return definition

    def update_custom_field(
        self,
        field_id: str,
        label: str | None = None,
        data_type: FieldDataType | None = None,
    ) -> ContactFieldDefinition:
        """Relabel or retype a custom field. The id never changes."""
        current = self._require_custom(field_id)
        updates: dict[str, str] = {}
        if label is not None:
            if not label.strip():
                raise FieldCatalogError("Field label must not be empty")
            updates["label"] = label.strip()
        if data_type is not None:
            updates["data_type"] = data_type

        updated = ContactFieldDefinition.model_validate({**current.model_dump(), **updates})
        self._fields[field_id] = updated
        return updated

    def delete_custom_field(self, field_id: str) -> ContactFieldDefinition:
        removed = self._require_custom(field_id)
        del self._fields[field_id]
        logger.info("Deleted custom field %s", field_id)
        return removed

    def _require_custom(self, field_id: str) -> ContactFieldDefinition:
        definition = self._fields.get(field_id)
        if definition is None:
            raise FieldCatalogError(f'Field with ID "{field_id}" not found')
        if definition.is_core:
            raise FieldCatalogError(f'Cannot modify core field "{field_id}"')
        return definition


def require_catalog(
    catalog: Iterable[ContactFieldDefinition] | None,
) -> list[ContactFieldDefinition]:
    """Materialize a catalog, failing loudly when it is absent or empty."""
    if catalog is None:
        raise CatalogUnavailableError("Contact field catalog is unavailable")
    fields = list(catalog)
    if not fields:
        raise CatalogUnavailableError("Contact field catalog is empty")
    return fields
