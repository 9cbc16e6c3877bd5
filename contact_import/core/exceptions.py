"""
Engine error types.

Per-row data problems are never raised; they are collected on the
reconciliation plan. Only structural misuse surfaces as an exception.
"""


class ImportEngineError(ValueError):
    """Base class for fatal engine errors."""


class CatalogUnavailableError(ImportEngineError):
    """The contact field catalog is missing or empty."""


class DirectoryUnavailableError(ImportEngineError):
    """The user/agent directory could not be provided."""


class FieldCatalogError(ImportEngineError):
    """Invalid custom-field operation (collision, core field, unknown id)."""


class MappingValidationError(ImportEngineError):
    """The confirmed mapping set is ambiguous or points at unknown fields."""

    def __init__(self, errors: list[str]):
        self.errors = list(errors)
        super().__init__("; ".join(self.errors) or "Invalid field mappings")
